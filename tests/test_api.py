from datetime import date, timedelta

import pytest

from barbershop.db import get_engine, locked_session
from barbershop.main import app

from conftest import MONDAY, TUESDAY


def book(client, shop, service=None, customer=None, on=MONDAY, at="10:00", barber=None):
    return client.post(
        "/appointments",
        json={
            "barber_id": barber or shop.barber,
            "service_id": service or shop.haircut,
            "customer_id": customer or shop.alice,
            "date": on.isoformat(),
            "time": at,
        },
    )


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_lists_barbers_and_services(client, shop):
    barbers = client.get("/barbers").json()
    services = client.get("/services").json()

    assert [b["name"] for b in barbers] == ["Budi", "Andi"]
    assert [(s["name"], s["duration_minutes"]) for s in services] == [
        ("Haircut", 30),
        ("Full Service", 60),
        ("Coloring", 90),
    ]


class TestAvailabilityEndpoint:
    def test_working_day(self, client, shop):
        response = client.get(f"/barbers/{shop.barber}/availability", params={"date": MONDAY.isoformat()})

        assert response.status_code == 200
        body = response.json()
        assert body["available"] is True
        assert body["working_hours"] == {"start": "09:00:00", "end": "17:00:00"}
        assert len(body["slots"]) == 16
        assert body["slots"][0] == {"time": "09:00", "available": True}

    def test_booked_slot_is_unavailable(self, client, shop):
        book(client, shop, service=shop.full, at="14:00")

        body = client.get(f"/barbers/{shop.barber}/availability", params={"date": MONDAY.isoformat()}).json()

        taken = [s["time"] for s in body["slots"] if not s["available"]]
        assert taken == ["14:00", "14:30"]

    def test_not_working_day(self, client, shop):
        body = client.get(f"/barbers/{shop.barber}/availability", params={"date": TUESDAY.isoformat()}).json()

        assert body["available"] is False
        assert body["reason"] == "not working"
        assert body["working_hours"] is None
        assert body["slots"] == []

    def test_blocked_day_reports_admin_reason(self, client, shop):
        client.post(
            f"/admin/barbers/{shop.barber}/blocked-dates",
            json={"date": MONDAY.isoformat(), "reason": "Holiday"},
        )

        body = client.get(f"/barbers/{shop.barber}/availability", params={"date": MONDAY.isoformat()}).json()

        assert body["available"] is False
        assert body["reason"] == "Holiday"
        assert body["slots"] == []

    def test_blocked_day_without_reason(self, client, shop):
        client.post(f"/admin/barbers/{shop.barber}/blocked-dates", json={"date": MONDAY.isoformat()})

        body = client.get(f"/barbers/{shop.barber}/availability", params={"date": MONDAY.isoformat()}).json()

        assert body["reason"] == "blocked"

    def test_last_representable_day(self, client, shop):
        client.put(
            f"/admin/barbers/{shop.barber}/working-hours",
            json={"weekday": date.max.weekday(), "start_time": "09:00", "end_time": "17:00"},
        )

        response = client.get(f"/barbers/{shop.barber}/availability", params={"date": "9999-12-31"})

        assert response.status_code == 200
        assert len(response.json()["slots"]) == 16

    def test_unknown_barber(self, client, shop):
        response = client.get("/barbers/9999/availability", params={"date": MONDAY.isoformat()})

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_bad_date(self, client, shop):
        response = client.get(f"/barbers/{shop.barber}/availability", params={"date": "next monday"})

        assert response.status_code == 422


class TestBookingEndpoint:
    def test_created(self, client, shop):
        response = book(client, shop, service=shop.full)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "PENDING"
        assert body["starts_at"] == "2030-01-07T10:00:00"
        assert body["ends_at"] == "2030-01-07T11:00:00"
        assert body["barber"]["name"] == "Budi"
        assert body["service"]["name"] == "Full Service"

    def test_conflict(self, client, shop):
        book(client, shop)

        response = book(client, shop, customer=shop.bob)

        assert response.status_code == 409
        assert response.json() == {"error": "slot_conflict", "detail": "This slot is no longer available"}

    def test_past(self, client, shop):
        response = book(client, shop, on=MONDAY - timedelta(days=2))

        assert response.status_code == 422
        assert response.json()["error"] == "past_time"

    def test_blocked(self, client, shop):
        client.post(f"/admin/barbers/{shop.barber}/blocked-dates", json={"date": MONDAY.isoformat()})

        response = book(client, shop)

        assert response.status_code == 409
        assert response.json()["error"] == "blocked"

    @pytest.mark.parametrize("on, at", [(MONDAY, "08:30"), (MONDAY, "16:45"), (TUESDAY, "10:00")])
    def test_outside_hours(self, client, shop, on, at):
        response = book(client, shop, on=on, at=at)

        assert response.status_code == 422
        assert response.json()["error"] == "outside_hours"

    def test_unknown_service(self, client, shop):
        response = book(client, shop, service=9999)

        assert response.status_code == 404

    def test_time_with_timezone_offset(self, client, shop):
        response = book(client, shop, at="10:00:00Z")

        assert response.status_code == 422
        assert "error" not in response.json()

    def test_malformed_time(self, client, shop):
        response = book(client, shop, at="half past ten")

        assert response.status_code == 422
        assert "error" not in response.json()


class TestCancelAndStatus:
    def test_owner_cancels(self, client, shop):
        appt = book(client, shop).json()

        response = client.patch(f"/appointments/{appt['id']}/cancel", json={"customer_id": shop.alice})

        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"
        assert book(client, shop, customer=shop.bob).status_code == 201

    def test_other_customer_is_forbidden(self, client, shop):
        appt = book(client, shop).json()

        response = client.patch(f"/appointments/{appt['id']}/cancel", json={"customer_id": shop.bob})

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    def test_confirm(self, client, shop):
        appt = book(client, shop).json()

        response = client.patch(f"/admin/appointments/{appt['id']}/status", json={"status": "CONFIRMED"})

        assert response.status_code == 200
        assert response.json()["status"] == "CONFIRMED"

    def test_invalid_transition(self, client, shop):
        appt = book(client, shop).json()
        client.patch(f"/admin/appointments/{appt['id']}/status", json={"status": "CANCELLED"})

        response = client.patch(f"/admin/appointments/{appt['id']}/status", json={"status": "CONFIRMED"})

        assert response.status_code == 409
        assert response.json()["error"] == "invalid_transition"

    def test_unknown_status_value(self, client, shop):
        appt = book(client, shop).json()

        response = client.patch(f"/admin/appointments/{appt['id']}/status", json={"status": "DONE"})

        assert response.status_code == 422

    def test_status_change_while_database_is_locked(self, client, shop, engine, impatient_engine):
        appt = book(client, shop).json()
        app.dependency_overrides[get_engine] = lambda: impatient_engine

        with locked_session(engine, 5):
            response = client.patch(f"/admin/appointments/{appt['id']}/status", json={"status": "CONFIRMED"})

        assert response.status_code == 409
        assert response.json()["error"] == "busy"

    def test_unknown_appointment(self, client, shop):
        response = client.patch("/admin/appointments/9999/status", json={"status": "CONFIRMED"})

        assert response.status_code == 404


class TestScheduleEndpoint:
    def test_shows_who_booked_each_slot(self, client, shop):
        appt = book(client, shop, service=shop.full, customer=shop.bob, at="14:00").json()

        schedule = client.get("/schedule", params={"date": MONDAY.isoformat()}).json()

        assert [entry["barber"]["name"] for entry in schedule] == ["Budi", "Andi"]
        budi = schedule[0]
        booked = [s for s in budi["slots"] if s["booked_by"] is not None]
        assert [s["time"] for s in booked] == ["14:00", "14:30"]
        assert booked[0]["booked_by"] == {
            "appointment_id": appt["id"],
            "customer": "Bob",
            "service": "Full Service",
            "status": "PENDING",
        }
        assert all(s["booked_by"] is None for s in schedule[1]["slots"])

    def test_mixes_blocked_and_working_barbers(self, client, shop):
        client.post(
            f"/admin/barbers/{shop.other_barber}/blocked-dates",
            json={"date": MONDAY.isoformat(), "reason": "Sick"},
        )

        budi, andi = client.get("/schedule", params={"date": MONDAY.isoformat()}).json()

        assert budi["available"] is True
        assert andi["available"] is False
        assert andi["reason"] == "Sick"


class TestCustomers:
    def test_register(self, client):
        response = client.post("/customers", json={"name": "Citra", "email": "citra@example.com"})

        assert response.status_code == 201
        assert response.json()["email"] == "citra@example.com"

    def test_duplicate_email(self, client, shop):
        response = client.post("/customers", json={"name": "Alice Again", "email": "alice@example.com"})

        assert response.status_code == 409
        assert response.json()["error"] == "already_exists"

    def test_invalid_email(self, client):
        response = client.post("/customers", json={"name": "Dewi", "email": "not-an-email"})

        assert response.status_code == 422

    def test_appointments_newest_first(self, client, shop):
        book(client, shop, at="10:00")
        book(client, shop, at="15:00")
        book(client, shop, customer=shop.bob, at="12:00")

        appts = client.get(f"/customers/{shop.alice}/appointments").json()

        assert [a["starts_at"] for a in appts] == ["2030-01-07T15:00:00", "2030-01-07T10:00:00"]

    def test_unknown_customer(self, client, shop):
        assert client.get("/customers/9999/appointments").status_code == 404


class TestAdminAppointments:
    def test_filters(self, client, shop):
        first = book(client, shop, at="15:00").json()
        book(client, shop, at="10:00")
        book(client, shop, barber=shop.other_barber, customer=shop.bob, at="11:00")
        client.patch(f"/admin/appointments/{first['id']}/status", json={"status": "CONFIRMED"})

        everything = client.get("/admin/appointments", params={"on_date": MONDAY.isoformat()}).json()
        budi = client.get("/admin/appointments", params={"barber_id": shop.barber}).json()
        confirmed = client.get("/admin/appointments", params={"status": "CONFIRMED"}).json()
        tuesday = client.get("/admin/appointments", params={"on_date": TUESDAY.isoformat()}).json()

        assert [a["starts_at"][11:16] for a in everything] == ["10:00", "11:00", "15:00"]
        assert {a["barber_id"] for a in budi} == {shop.barber}
        assert len(budi) == 2
        assert [a["id"] for a in confirmed] == [first["id"]]
        assert tuesday == []


class TestAdminSchedule:
    def test_put_and_get_working_hours(self, client, shop):
        response = client.put(
            f"/admin/barbers/{shop.barber}/working-hours",
            json={"weekday": 1, "start_time": "10:00", "end_time": "14:00"},
        )
        assert response.status_code == 200

        rows = client.get(f"/admin/barbers/{shop.barber}/working-hours").json()
        assert [(r["weekday"], r["start_time"], r["end_time"]) for r in rows] == [
            (0, "09:00:00", "17:00:00"),
            (1, "10:00:00", "14:00:00"),
        ]

        body = client.get(f"/barbers/{shop.barber}/availability", params={"date": TUESDAY.isoformat()}).json()
        assert len(body["slots"]) == 8

    def test_start_must_precede_end(self, client, shop):
        response = client.put(
            f"/admin/barbers/{shop.barber}/working-hours",
            json={"weekday": 1, "start_time": "14:00", "end_time": "14:00"},
        )

        assert response.status_code == 422

    def test_weekday_out_of_range(self, client, shop):
        response = client.put(
            f"/admin/barbers/{shop.barber}/working-hours",
            json={"weekday": 7, "start_time": "09:00", "end_time": "17:00"},
        )

        assert response.status_code == 422

    def test_bulk(self, client, shop):
        response = client.put(
            f"/admin/barbers/{shop.barber}/working-hours/bulk",
            json={
                "schedule": [
                    {"weekday": 2, "start_time": "09:00", "end_time": "12:00"},
                    {"weekday": 1, "start_time": "13:00", "end_time": "18:00", "is_active": False},
                ]
            },
        )

        assert response.status_code == 200
        assert [r["weekday"] for r in response.json()] == [1, 2]
        body = client.get(f"/barbers/{shop.barber}/availability", params={"date": TUESDAY.isoformat()}).json()
        assert body["reason"] == "not working"

    def test_bulk_rejects_duplicate_weekdays(self, client, shop):
        response = client.put(
            f"/admin/barbers/{shop.barber}/working-hours/bulk",
            json={
                "schedule": [
                    {"weekday": 2, "start_time": "09:00", "end_time": "12:00"},
                    {"weekday": 2, "start_time": "13:00", "end_time": "18:00"},
                ]
            },
        )

        assert response.status_code == 422

    def test_block_list_and_unblock(self, client, shop):
        created = client.post(
            f"/admin/barbers/{shop.barber}/blocked-dates",
            json={"date": MONDAY.isoformat(), "reason": "Holiday"},
        )
        assert created.status_code == 201

        duplicate = client.post(f"/admin/barbers/{shop.barber}/blocked-dates", json={"date": MONDAY.isoformat()})
        assert duplicate.status_code == 409
        assert duplicate.json()["error"] == "already_exists"

        blocks = client.get(f"/admin/barbers/{shop.barber}/blocked-dates").json()
        assert [(b["date"], b["reason"]) for b in blocks] == [(MONDAY.isoformat(), "Holiday")]

        deleted = client.delete(f"/admin/blocked-dates/{created.json()['id']}")
        assert deleted.status_code == 200
        assert client.get(f"/admin/barbers/{shop.barber}/blocked-dates").json() == []
        assert book(client, shop).status_code == 201

    def test_unblock_unknown(self, client, shop):
        assert client.delete("/admin/blocked-dates/9999").status_code == 404

    def test_unknown_barber(self, client, shop):
        assert client.get("/admin/barbers/9999/working-hours").status_code == 404
