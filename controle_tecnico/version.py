"""Controle Técnico Meta information.
   Controle Técnico keeps track of applications, hostings, domains
   and encrypted secrets.
"""
__title__ = 'controle_tecnico'
__description__ = (
   'Controle Técnico: administrative API for applications, hostings, '
   'domains and encrypted secrets.'
)
__version__ = '2.0.0'
__license__ = 'Apache-2.0'
