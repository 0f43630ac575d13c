# API Route Constants

API_BASE = '/api'

# Inventory routes
INVENTORY_BASE = f'{API_BASE}/inventory'
TICKET_TYPE_CREATE = f'{INVENTORY_BASE}/ticket-types'
TICKET_TYPE_GET = f'{INVENTORY_BASE}/ticket-types/{{ticket_type_id}}'

# Booking routes
BOOKING_BASE = f'{API_BASE}/booking'
BOOKING_RESERVE = f'{BOOKING_BASE}/reserve'
BOOKING_PURCHASE = f'{BOOKING_BASE}/purchase'
BOOKING_RESERVATION = f'{BOOKING_BASE}/reserve/{{order_id}}'
BOOKING_USER_ORDERS = f'{BOOKING_BASE}/user/{{buyer_address}}'
BOOKING_AVAILABILITY = f'{BOOKING_BASE}/availability/{{event_id}}/{{ticket_type_id}}'
BOOKING_CLEANUP_EXPIRED = f'{BOOKING_BASE}/admin/cleanup-expired'

# Marketplace routes
MARKETPLACE_BASE = f'{API_BASE}/marketplace'
LISTINGS = f'{MARKETPLACE_BASE}/listings'
LISTING_GET = f'{MARKETPLACE_BASE}/listings/{{listing_id}}'
LISTING_BUY = f'{MARKETPLACE_BASE}/listings/{{listing_id}}/buy'
LISTING_CANCEL = f'{MARKETPLACE_BASE}/listings/{{listing_id}}/cancel'
SELLER_LISTINGS = f'{MARKETPLACE_BASE}/sellers/{{seller_address}}/listings'
MARKETPLACE_STATS = f'{MARKETPLACE_BASE}/stats'
MARKETPLACE_OWNERSHIP = f'{MARKETPLACE_BASE}/ownership'
MARKETPLACE_CLEANUP_EXPIRED = f'{MARKETPLACE_BASE}/admin/cleanup-expired'
