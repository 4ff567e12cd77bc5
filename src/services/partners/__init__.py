"""
Partner gateway clients.
"""
from src.services.partners.base import PartnerClient
from src.services.partners.bccreditrapid import BCCreditRapidClient, BCCreditRapidLead
from src.services.partners.creditfix import CreditFixClient
from src.services.partners.credius import CrediusClient
from src.services.partners.flex import FlexClient
from src.services.partners.flexcredit import FlexCreditClient
from src.services.partners.fourpay import FourPayClient, UnknownTemplateError, render_template
from src.services.partners.icredit import ICreditClient

__all__ = [
    "PartnerClient",
    "BCCreditRapidClient",
    "BCCreditRapidLead",
    "CreditFixClient",
    "CrediusClient",
    "FlexClient",
    "FlexCreditClient",
    "FourPayClient",
    "ICreditClient",
    "UnknownTemplateError",
    "render_template",
]
