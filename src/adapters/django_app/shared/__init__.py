"""
Componentes Django compartilhados entre domínios.
"""
