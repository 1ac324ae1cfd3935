"""
Tests for the flight command handlers against an in-memory SQLite database.
"""

import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from flightinfo.database.models import Flight
from flightinfo.exceptions import BusinessRuleViolation, Conflict, NotFound, ValidationFailed
from flightinfo.models.commands import DeleteFlightCommand, EmptyCommandResponse
from flightinfo.models.enums import FlightStatus
from flightinfo.versioning import ZERO_VERSION

from conftest import load_flight, utc


def count_flights(db_config) -> int:
    with db_config.get_read_session_context() as session:
        return session.query(Flight).count()


class TestCreateFlight:
    """Test SetFlightCommandHandler when creating flights."""

    def test_create_flight(self, db_config, set_flight_handler, new_flight_command):
        result = set_flight_handler.execute(new_flight_command)

        assert result.id > 0
        flight = load_flight(db_config, result.id)
        assert flight.flight_number == "ANZ179M"
        assert flight.airline == "Air New Zealand"
        assert flight.status == FlightStatus.SCHEDULED
        assert flight.departure_time == utc(2024, 8, 16, 7, 5)
        assert flight.version != ZERO_VERSION

    def test_create_ignores_supplied_version(self, db_config, set_flight_handler, new_flight_command):
        supplied = uuid.uuid4()
        result = set_flight_handler.execute(replace(new_flight_command, version=supplied))

        assert load_flight(db_config, result.id).version != supplied

    def test_create_assigns_distinct_ids(self, set_flight_handler, new_flight_command):
        first = set_flight_handler.execute(new_flight_command)
        second = set_flight_handler.execute(new_flight_command)

        assert first.id != second.id

    def test_create_preserves_offset(self, db_config, set_flight_handler, new_flight_command):
        nzst = timezone(timedelta(hours=12))
        command = replace(
            new_flight_command,
            departure_time=utc(2024, 8, 16, 7, 5).astimezone(nzst),
            arrival_time=utc(2024, 8, 16, 8, 25).astimezone(nzst),
        )

        flight = load_flight(db_config, set_flight_handler.execute(command).id)

        assert flight.departure_time.utcoffset() == timedelta(hours=12)
        assert flight.departure_time == utc(2024, 8, 16, 7, 5)

    def test_naive_time_taken_as_utc(self, db_config, set_flight_handler, new_flight_command):
        command = replace(new_flight_command, departure_time=datetime(2024, 8, 16, 7, 5))

        flight = load_flight(db_config, set_flight_handler.execute(command).id)

        assert flight.departure_time == utc(2024, 8, 16, 7, 5)
        assert flight.departure_time.utcoffset() == timedelta(0)

    def test_same_airport_at_both_ends(self, set_flight_handler, new_flight_command):
        command = replace(new_flight_command, departure_airport="NZWN", arrival_airport="NZWN")
        assert set_flight_handler.execute(command).id > 0

    def test_validation_failure(self, db_config, set_flight_handler, new_flight_command):
        command = replace(new_flight_command, flight_number="", arrival_airport="WLG")

        with pytest.raises(ValidationFailed) as excinfo:
            set_flight_handler.execute(command)

        assert excinfo.value.public_message == "Invalid request."
        assert [error.field for error in excinfo.value.errors] == ["flight_number", "arrival_airport"]
        assert count_flights(db_config) == 0

    def test_arrival_before_departure(self, db_config, set_flight_handler, new_flight_command):
        command = replace(new_flight_command, arrival_time=new_flight_command.departure_time - timedelta(minutes=1))

        with pytest.raises(BusinessRuleViolation) as excinfo:
            set_flight_handler.execute(command)

        assert excinfo.value.public_message == "Arrival time must be after departure time."
        assert count_flights(db_config) == 0

    def test_arrival_equal_to_departure(self, set_flight_handler, new_flight_command):
        command = replace(new_flight_command, arrival_time=new_flight_command.departure_time)

        with pytest.raises(BusinessRuleViolation):
            set_flight_handler.execute(command)

    def test_arrival_one_microsecond_after_departure(self, set_flight_handler, new_flight_command):
        command = replace(
            new_flight_command,
            arrival_time=new_flight_command.departure_time + timedelta(microseconds=1),
        )
        assert set_flight_handler.execute(command).id > 0

    def test_unknown_departure_airport(self, set_flight_handler, new_flight_command):
        with pytest.raises(BusinessRuleViolation) as excinfo:
            set_flight_handler.execute(replace(new_flight_command, departure_airport="YSSY"))

        assert excinfo.value.public_message == "Airport with code YSSY not found."

    def test_unknown_arrival_reported_before_departure(self, set_flight_handler, new_flight_command):
        command = replace(new_flight_command, departure_airport="YSSY", arrival_airport="KSEA")

        with pytest.raises(BusinessRuleViolation) as excinfo:
            set_flight_handler.execute(command)

        assert excinfo.value.public_message == "Airport with code KSEA not found."


class TestUpdateFlight:
    """Test SetFlightCommandHandler when updating flights."""

    def test_update_flight(self, db_config, set_flight_handler, new_flight_command, stored_flight):
        flight_id, version = stored_flight
        command = replace(new_flight_command, flight_id=flight_id, version=version, status=FlightStatus.LANDED)

        result = set_flight_handler.execute(command)

        assert result.id == flight_id
        flight = load_flight(db_config, flight_id)
        assert flight.status == FlightStatus.LANDED
        assert flight.flight_number == "ANZ179M"
        assert flight.version not in (version, ZERO_VERSION)

    def test_update_with_stale_version(self, db_config, set_flight_handler, new_flight_command, stored_flight):
        flight_id, version = stored_flight
        command = replace(new_flight_command, flight_id=flight_id, version=uuid.uuid4())

        with pytest.raises(Conflict):
            set_flight_handler.execute(command)

        flight = load_flight(db_config, flight_id)
        assert flight.version == version
        assert flight.flight_number == "TSC236"

    def test_second_update_with_same_version_conflicts(self, set_flight_handler, new_flight_command, stored_flight):
        flight_id, version = stored_flight
        command = replace(new_flight_command, flight_id=flight_id, version=version)

        set_flight_handler.execute(command)

        with pytest.raises(Conflict):
            set_flight_handler.execute(replace(command, status=FlightStatus.CANCELLED))

    def test_update_missing_version_conflicts(self, set_flight_handler, new_flight_command, stored_flight):
        flight_id, _ = stored_flight

        with pytest.raises(Conflict):
            set_flight_handler.execute(replace(new_flight_command, flight_id=flight_id))

    def test_update_unknown_flight(self, set_flight_handler, new_flight_command):
        command = replace(new_flight_command, flight_id=999, version=uuid.uuid4())

        with pytest.raises(NotFound):
            set_flight_handler.execute(command)

    def test_concurrent_write_detected_by_conditional_update(
            self, db_config, set_flight_handler, new_flight_command, stored_flight):
        """A writer committing between the read and the update is reported as a conflict."""
        flight_id, version = stored_flight
        command = replace(new_flight_command, flight_id=flight_id, version=uuid.uuid4())

        with patch("flightinfo.services.commands.ensure_version_matches"):
            with pytest.raises(Conflict):
                set_flight_handler.execute(command)

        assert load_flight(db_config, flight_id).version == version

    def test_update_rejected_by_business_rule_keeps_row(
            self, db_config, set_flight_handler, new_flight_command, stored_flight):
        flight_id, version = stored_flight
        command = replace(new_flight_command, flight_id=flight_id, version=version, arrival_airport="YSSY")

        with pytest.raises(BusinessRuleViolation):
            set_flight_handler.execute(command)

        assert load_flight(db_config, flight_id).version == version


class TestDeleteFlight:
    """Test DeleteFlightCommandHandler."""

    def test_delete_flight(self, db_config, delete_flight_handler, stored_flight):
        flight_id, version = stored_flight

        result = delete_flight_handler.execute(DeleteFlightCommand(flight_id=flight_id, version=version))

        assert isinstance(result, EmptyCommandResponse)
        assert load_flight(db_config, flight_id) is None

    def test_delete_with_stale_version(self, db_config, delete_flight_handler, stored_flight):
        flight_id, _ = stored_flight

        with pytest.raises(Conflict):
            delete_flight_handler.execute(DeleteFlightCommand(flight_id=flight_id, version=uuid.uuid4()))

        assert load_flight(db_config, flight_id) is not None

    def test_concurrent_write_detected_by_conditional_delete(self, db_config, delete_flight_handler, stored_flight):
        """A writer committing between the read and the delete is reported as a conflict."""
        flight_id, version = stored_flight

        with patch("flightinfo.services.commands.ensure_version_matches"):
            with pytest.raises(Conflict):
                delete_flight_handler.execute(DeleteFlightCommand(flight_id=flight_id, version=uuid.uuid4()))

        flight = load_flight(db_config, flight_id)
        assert flight is not None
        assert flight.version == version

    def test_delete_unknown_flight(self, delete_flight_handler):
        with pytest.raises(NotFound):
            delete_flight_handler.execute(DeleteFlightCommand(flight_id=999, version=uuid.uuid4()))

    def test_delete_twice(self, delete_flight_handler, stored_flight):
        flight_id, version = stored_flight
        command = DeleteFlightCommand(flight_id=flight_id, version=version)

        delete_flight_handler.execute(command)

        with pytest.raises(NotFound):
            delete_flight_handler.execute(command)

    @pytest.mark.parametrize("flight_id, version", [
        (0, uuid.uuid4()),
        (-1, uuid.uuid4()),
        (1, ZERO_VERSION),
    ])
    def test_delete_validation(self, delete_flight_handler, flight_id, version):
        with pytest.raises(ValidationFailed) as excinfo:
            delete_flight_handler.execute(DeleteFlightCommand(flight_id=flight_id, version=version))

        assert excinfo.value.public_message == \
            "Delete flight request must have positive FlightID and non-empty Version"

    def test_delete_after_update_needs_new_version(
            self, db_config, set_flight_handler, delete_flight_handler, new_flight_command, stored_flight):
        flight_id, version = stored_flight
        set_flight_handler.execute(replace(new_flight_command, flight_id=flight_id, version=version))

        with pytest.raises(Conflict):
            delete_flight_handler.execute(DeleteFlightCommand(flight_id=flight_id, version=version))

        current = load_flight(db_config, flight_id).version
        delete_flight_handler.execute(DeleteFlightCommand(flight_id=flight_id, version=current))
        assert load_flight(db_config, flight_id) is None
