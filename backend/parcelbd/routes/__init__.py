# Routes package init
"""
ParcelBD Backend — API Routes Package
======================================

Route Inventory:
    - parcels.py:  GET/POST /parcels, GET/PUT/DELETE /parcels/{id},
                   POST /parcels/{id}/paid
    - payments.py: POST /create-payment-intent, POST /payments/history,
                   GET /payments/user/{email}, GET /payments/all
    - health.py:   GET /, GET /health

Routes stay thin: read the request, call one service, return the result.
"""
