from app.models.amenity import Amenity
from app.models.booking import Booking
from app.models.venue import Venue, VenueCalendarEntry, venue_amenities

__all__ = ["Amenity", "Booking", "Venue", "VenueCalendarEntry", "venue_amenities"]
