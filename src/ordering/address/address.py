"""Address aggregate — the address book entries orders are delivered to.

Addresses are managed by the account pages; ordering only reads them to
confirm that the requester owns the delivery address.
"""

from enum import Enum

from protean.fields import Identifier, String

from ordering.domain import ordering


class AddressLabel(Enum):
    HOME = "HOME"
    WORK = "WORK"
    OTHER = "OTHER"


@ordering.aggregate
class Address:
    user_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    phone = String(required=True, max_length=20)
    street = String(required=True, max_length=255)
    landmark = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    pincode = String(required=True, max_length=10)
    label = String(choices=AddressLabel, default=AddressLabel.HOME.value)

    def is_owned_by(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)
