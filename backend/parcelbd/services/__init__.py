# Services package init
"""
ParcelBD Backend — Services Layer
==================================

What:  Adapters between routes (HTTP) and the database / payment provider.
How:   Services take a session (or amount) and return plain results; they
       raise application exceptions that the global handlers render.

Service Inventory:
    - ParcelService:          Parcel Store Adapter (parcels table)
    - PaymentHistoryService:  Payment History Adapter (paymentHistory table)
    - PaymentGateway (ABC):   Interface for payment providers
    - StripePaymentGateway:   Stripe PaymentIntents implementation
"""
