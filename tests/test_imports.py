"""
Todo módulo do pacote src precisa importar.

Um erro de sintaxe em um port derruba a importação de tudo que
depende dele; este teste aponta o módulo quebrado diretamente.
"""

from importlib import import_module
from pathlib import Path

import pytest

SRC = Path(__file__).parent.parent / 'src'


def _modulos():
    for caminho in sorted(SRC.rglob('*.py')):
        partes = caminho.relative_to(SRC.parent).with_suffix('').parts
        if partes[-1] == '__init__':
            partes = partes[:-1]
        yield '.'.join(partes)


@pytest.mark.parametrize('modulo', list(_modulos()))
def test_modulo_importa(modulo):
    import_module(modulo)
