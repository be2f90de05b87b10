"""Driver management — registration, availability, location and removal."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from fulfillment.delivery.delivery import Delivery
from fulfillment.domain import fulfillment
from fulfillment.driver.driver import Driver
from fulfillment.shared.errors import ConflictError, load


@fulfillment.command(part_of="Driver")
class RegisterDriver:
    name = String(required=True, max_length=100)
    phone = String(required=True, max_length=30)
    vehicle_type = String(max_length=50)
    vehicle_number = String(max_length=30)
    capacity = Integer(min_value=1)


@fulfillment.command(part_of="Driver")
class ChangeDriverAvailability:
    """Take a driver online (``available``) or ``offline``."""

    driver_id = Identifier(required=True)
    status = String(required=True, max_length=20)


@fulfillment.command(part_of="Driver")
class UpdateDriverLocation:
    driver_id = Identifier(required=True)
    location = String(required=True, max_length=255)


@fulfillment.command(part_of="Driver")
class RemoveDriver:
    driver_id = Identifier(required=True)


@fulfillment.command_handler(part_of=Driver)
class DriverManagementHandler:
    @handle(RegisterDriver)
    def register_driver(self, command):
        driver = Driver.register(
            name=command.name,
            phone=command.phone,
            vehicle_type=command.vehicle_type,
            vehicle_number=command.vehicle_number,
            capacity=command.capacity,
        )
        current_domain.repository_for(Driver).add(driver)
        return str(driver.id)

    @handle(ChangeDriverAvailability)
    def change_availability(self, command):
        driver = load(Driver, command.driver_id)
        driver.change_availability(command.status)
        current_domain.repository_for(Driver).add(driver)
        return driver

    @handle(UpdateDriverLocation)
    def update_location(self, command):
        driver = load(Driver, command.driver_id)
        driver.update_location(command.location)
        current_domain.repository_for(Driver).add(driver)
        return driver

    @handle(RemoveDriver)
    def remove_driver(self, command):
        driver = load(Driver, command.driver_id)

        # Terminal deliveries keep their driver, so any reference blocks removal
        referencing = current_domain.repository_for(Delivery).for_driver(str(driver.id))
        if referencing:
            raise ConflictError(
                {"driver_id": [f"Driver `{driver.id}` is referenced by {len(referencing)} deliveries"]}
            )

        repo = current_domain.repository_for(Driver)
        driver.mark_removed()
        repo.add(driver)
        repo._dao.delete(driver)
