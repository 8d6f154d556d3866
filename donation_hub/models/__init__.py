from donation_hub.models.accountability import Accountability, AccountabilityDonation
from donation_hub.models.donation import Donation
from donation_hub.models.product import Product
from donation_hub.models.profile import Profile

__all__ = [
    "Accountability",
    "AccountabilityDonation",
    "Donation",
    "Product",
    "Profile",
]
