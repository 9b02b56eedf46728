from airbuddy.schemas import Location

# Seed points for the pollution map, queried as custom locations.
CITIES = [
    Location(lat=10.7867, lon=76.6548, name="Palakkad"),
    Location(lat=9.9312, lon=76.2673, name="Kochi"),
    Location(lat=8.5241, lon=76.9366, name="Thiruvananthapuram"),
    Location(lat=11.2588, lon=75.7804, name="Kozhikode"),
    Location(lat=10.5276, lon=76.2144, name="Thrissur"),
    Location(lat=28.6139, lon=77.2090, name="New Delhi"),
    Location(lat=19.0760, lon=72.8777, name="Mumbai"),
    Location(lat=12.9716, lon=77.5946, name="Bengaluru"),
    Location(lat=13.0827, lon=80.2707, name="Chennai"),
    Location(lat=22.5726, lon=88.3639, name="Kolkata"),
    Location(lat=51.5074, lon=-0.1278, name="London"),
    Location(lat=40.7128, lon=-74.0060, name="New York"),
    Location(lat=35.6762, lon=139.6503, name="Tokyo"),
    Location(lat=-33.8688, lon=151.2093, name="Sydney"),
]
