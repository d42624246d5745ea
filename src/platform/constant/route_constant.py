# API Route Constants

# Base API
API_BASE = '/api'

# Booking routes
BOOKING_BASE = f'{API_BASE}/booking'
BOOKING_CREATE = f'{BOOKING_BASE}/create'
BOOKING_OCCUPIED_SEATS = f'{BOOKING_BASE}/occupied-seats/{{show_id}}'
BOOKING_TOP_MOVIE = f'{BOOKING_BASE}/top-movie'
BOOKING_MY_BOOKINGS = f'{BOOKING_BASE}/my-bookings'

# Payment routes
PAYMENT_BASE = f'{API_BASE}/payment'
PAYMENT_WEBHOOK = f'{PAYMENT_BASE}/webhook'

# Show routes
SHOW_BASE = f'{API_BASE}/show'
SHOW_ADD = f'{SHOW_BASE}/add'
SHOW_ALL = f'{SHOW_BASE}/all'
SHOW_GET = f'{SHOW_BASE}/{{movie_id}}'

# TMDB catalog routes
TMDB_BASE = f'{API_BASE}/tmdb'
TMDB_TRAILERS = f'{TMDB_BASE}/trailers'
TMDB_SEARCH = f'{TMDB_BASE}/search'
TMDB_MOVIE = f'{TMDB_BASE}/movie/{{movie_id}}'
TMDB_MOVIE_VIDEOS = f'{TMDB_BASE}/movie/{{movie_id}}/videos'

# Identity routes
IDENTITY_BASE = f'{API_BASE}/identity'
IDENTITY_WEBHOOK = f'{IDENTITY_BASE}/webhook'

# Admin routes
ADMIN_BASE = f'{API_BASE}/admin'
ADMIN_IS_ADMIN = f'{ADMIN_BASE}/is-admin'
