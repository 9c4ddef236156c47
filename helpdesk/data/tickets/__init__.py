"""
Ticket models
"""

from helpdesk.data.tickets.ticket import Ticket, TicketPart

__all__ = ['Ticket', 'TicketPart']
