"""
Reference cities loaded by ``init_db.py --seed``.

(name, state, latitude, longitude)
"""

REFERENCE_CITIES = [
    ("Raleigh", "NC", 35.7796, -78.6382),
    ("Charlotte", "NC", 35.2271, -80.8431),
    ("Durham", "NC", 35.9940, -78.8986),
    ("Asheville", "NC", 35.5951, -82.5515),
    ("Wilmington", "NC", 34.2257, -77.9447),
    ("Columbia", "SC", 34.0007, -81.0348),
    ("Charleston", "SC", 32.7765, -79.9311),
    ("Richmond", "VA", 37.5407, -77.4360),
    ("Norfolk", "VA", 36.8508, -76.2859),
    ("Atlanta", "GA", 33.7490, -84.3880),
    ("Savannah", "GA", 32.0809, -81.0912),
    ("Nashville", "TN", 36.1627, -86.7816),
    ("Knoxville", "TN", 35.9606, -83.9207),
    ("Austin", "TX", 30.2672, -97.7431),
    ("Denver", "CO", 39.7392, -104.9903),
    ("Seattle", "WA", 47.6062, -122.3321),
    ("Portland", "OR", 45.5152, -122.6784),
    ("Portland", "ME", 43.6591, -70.2568),
]
