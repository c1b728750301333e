"""
Purchases App - Gift Reservation and Purchase Tracking

This app keeps two shoppers from buying the same gift and hides purchase
state from the person the gift is for.

Key Features:
- Short-lived reservations (one per item) with lazy expiry
- Purchase confirmation resolved by a conditional update
- Release and unmark back to Available
- Purge command for expired reservations

Architecture:
- Models: PurchaseReservation
- Services: reserve, confirm_purchase, release, unmark_purchase
- Views: thin function views over the services
"""
