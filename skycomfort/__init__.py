"""
                SkyComfort In-Flight Ordering

Backend for passenger in-flight ordering of meals, beverages,
entertainment and comfort items, with a mock card payment bridge
for the mobile client.

Version: 1.0.0
"""

__version__ = "1.0.0"
