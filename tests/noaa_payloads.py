"""
Canned NOAA CO-OPS responses used across the tests.

Heights follow a semidiurnal curve around Key West (station 8724580),
hourly from 2025-10-08 00:00 GMT.
"""

# Hourly predictions: low at 02:00, high at 08:00, low at 14:00, high at 20:00
KEY_WEST_HOURLY = {
    'predictions': [
        {'t': '2025-10-08 00:00', 'v': '0.412'},
        {'t': '2025-10-08 01:00', 'v': '0.198'},
        {'t': '2025-10-08 02:00', 'v': '0.105'},
        {'t': '2025-10-08 03:00', 'v': '0.231'},
        {'t': '2025-10-08 04:00', 'v': '0.544'},
        {'t': '2025-10-08 05:00', 'v': '0.951'},
        {'t': '2025-10-08 06:00', 'v': '1.342'},
        {'t': '2025-10-08 07:00', 'v': '1.618'},
        {'t': '2025-10-08 08:00', 'v': '1.702'},
        {'t': '2025-10-08 09:00', 'v': '1.577'},
        {'t': '2025-10-08 10:00', 'v': '1.281'},
        {'t': '2025-10-08 11:00', 'v': '0.903'},
        {'t': '2025-10-08 12:00', 'v': '0.560'},
        {'t': '2025-10-08 13:00', 'v': '0.337'},
        {'t': '2025-10-08 14:00', 'v': '0.291'},
        {'t': '2025-10-08 15:00', 'v': '0.436'},
        {'t': '2025-10-08 16:00', 'v': '0.735'},
        {'t': '2025-10-08 17:00', 'v': '1.104'},
        {'t': '2025-10-08 18:00', 'v': '1.438'},
        {'t': '2025-10-08 19:00', 'v': '1.640'},
        {'t': '2025-10-08 20:00', 'v': '1.655'},
        {'t': '2025-10-08 21:00', 'v': '1.470'},
        {'t': '2025-10-08 22:00', 'v': '1.133'},
        {'t': '2025-10-08 23:00', 'v': '0.764'},
    ]
}

KEY_WEST_LOW_HOURS = [2, 14]
KEY_WEST_HIGH_HOURS = [8, 20]

# Mix of valid and malformed points
WITH_MALFORMED_POINTS = {
    'predictions': [
        {'t': '2025-10-08 00:00', 'v': '1.000'},
        {'t': 'not a time', 'v': '1.100'},
        {'t': '2025-10-08 02:00', 'v': 'abc'},
        {'t': '2025-10-08 03:00', 'v': ''},
        {'t': '2025-10-08 04:00'},
        {'v': '1.200'},
        'garbage',
        {'t': '2025-10-08 05:00', 'v': 'NaN'},
        {'t': '2025-10-08 06:00', 'v': '1.500', 'type': 'H'},
        {'t': '2025-10-08T07:00:00Z', 'v': '1.300'},
    ]
}

# NOAA reports request problems with HTTP 200 and an error object
STATION_NOT_FOUND = {
    'error': {
        'message': 'No Predictions data was found. Please make sure the Datum input is valid.'
    }
}
