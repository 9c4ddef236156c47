"""
Ticket presentation services
"""

from helpdesk.services.tickets.ticket_service import TicketService
from helpdesk.services.tickets.report_service import TicketReportService

__all__ = ['TicketService', 'TicketReportService']
