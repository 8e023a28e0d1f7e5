"""Tests for FastAPI endpoints."""

import pytest
from datetime import datetime
from unittest.mock import patch
from lightsync.user_store import UserRecord

WINDOW = {"fadeIn": "06:00", "peakStart": "07:00", "peakEnd": "19:00", "fadeOut": "20:00", "color": "#FF9900"}


def set_time(clock, hour, minute=0):
    clock["now"] = datetime(2025, 6, 1, hour, minute)


class TestAccounts:
    """Tests for register/login/verify-token."""

    def test_register(self, test_client, user_store):
        response = test_client.post("/register", json={
            "firstName": "Grace", "lastName": "Hopper", "email": "grace@example.com", "password": "cobol"
        })
        assert response.status_code == 201
        assert response.json() == {"message": "Registration successful"}

        user = user_store.get_user("grace@example.com")
        assert user.first_name == "Grace"
        assert user.password != "cobol"
        assert user.settings == {}

    def test_register_duplicate(self, test_client, registered_user):
        email, _ = registered_user
        response = test_client.post("/register", json={"email": email, "password": "x"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Email already exists"

    def test_register_missing_password(self, test_client):
        response = test_client.post("/register", json={"email": "a@b.c"})
        assert response.status_code == 422

    def test_login(self, test_client, registered_user):
        email, password = registered_user
        response = test_client.post("/login", json={"email": email, "password": password})
        assert response.status_code == 200
        assert "token" in response.json()

    def test_login_wrong_password(self, test_client, registered_user):
        email, _ = registered_user
        response = test_client.post("/login", json={"email": email, "password": "wrong"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    def test_login_unknown_email(self, test_client):
        response = test_client.post("/login", json={"email": "nobody@example.com", "password": "x"})
        assert response.status_code == 401

    def test_login_missing_fields(self, test_client):
        response = test_client.post("/login", json={"email": "a@b.c"})
        assert response.status_code == 400

    def test_verify_token(self, test_client, auth_headers):
        response = test_client.post("/api/verify-token", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {
            "email": "ada@example.com",
            "firstName": "Ada",
            "message": "Token is valid",
        }

    def test_verify_token_missing(self, test_client):
        response = test_client.post("/api/verify-token")
        assert response.status_code == 401

    def test_verify_token_invalid(self, test_client):
        response = test_client.post("/api/verify-token", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 403


class TestSettingsEndpoints:
    """Tests for manual light settings."""

    def test_get_empty_settings(self, test_client, auth_headers):
        response = test_client.get("/settings", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {}

    def test_save_and_get(self, test_client, auth_headers):
        payload = {"r": 255, "g": 128, "b": 64, "brightness": 200, "filter": "warm"}
        response = test_client.post("/settings", json=payload, headers=auth_headers)
        assert response.status_code == 200

        assert test_client.get("/settings", headers=auth_headers).json() == payload

    def test_partial_update_keeps_other_fields(self, test_client, auth_headers):
        test_client.post("/settings", json={"r": 1, "g": 2, "b": 3}, headers=auth_headers)
        test_client.post("/settings", json={"brightness": 50}, headers=auth_headers)
        assert test_client.get("/settings", headers=auth_headers).json() == {"r": 1, "g": 2, "b": 3, "brightness": 50}

    def test_invalid_values(self, test_client, auth_headers):
        response = test_client.post("/settings", json={"r": 300}, headers=auth_headers)
        assert response.status_code == 422

    def test_requires_auth(self, test_client):
        assert test_client.get("/settings").status_code == 401

    def test_settings_created_on_first_save(self, test_client, user_store):
        """Should treat a record without settings as empty and create them on save."""
        from lightsync.auth import create_access_token

        user_store.put_user(UserRecord(email="nos@example.com", password="hash"))
        headers = {"Authorization": f"Bearer {create_access_token('nos@example.com', '')}"}

        assert test_client.get("/settings", headers=headers).json() == {}
        assert test_client.post("/settings", json={"r": 7}, headers=headers).status_code == 200
        assert user_store.get_user("nos@example.com").settings == {"r": 7}

    def test_deleted_user(self, test_client, auth_headers, user_store):
        user_store.save_users([])
        assert test_client.get("/settings", headers=auth_headers).status_code == 404
        assert test_client.post("/settings", json={"r": 1}, headers=auth_headers).status_code == 404


class TestTimerEndpoints:
    """Tests for timer and auto-daylight settings."""

    def test_get_timers_empty(self, test_client, auth_headers):
        response = test_client.get("/api/timers", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"timers": {}, "autoDaylight": None}

    def test_save_timers(self, test_client, auth_headers):
        payload = {
            "lightTimerEnabled": True,
            "co2TimerEnabled": False,
            "lightTimers": [WINDOW],
            "co2Timers": [],
        }
        response = test_client.post("/api/timers", json=payload, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["lightTimerDisabledByAutoDaylight"] is False

        data = test_client.get("/api/timers", headers=auth_headers).json()
        assert data["autoDaylight"] is False
        assert data["timers"]["lightTimerEnabled"] is True
        assert data["timers"]["lightTimers"] == [WINDOW]

    def test_save_timers_invalid_window(self, test_client, auth_headers):
        bad = dict(WINDOW, peakStart="25:00")
        response = test_client.post("/api/timers", json={"lightTimers": [bad]}, headers=auth_headers)
        assert response.status_code == 422

    def test_save_timers_with_auto_daylight(self, test_client, auth_headers):
        payload = {"autoDaylight": True, "lightTimerEnabled": True, "lightTimers": [WINDOW]}
        response = test_client.post("/api/timers", json=payload, headers=auth_headers)
        assert response.json()["lightTimerDisabledByAutoDaylight"] is True

        data = test_client.get("/api/timers", headers=auth_headers).json()
        assert data["timers"]["lightTimerEnabled"] is False

    def test_stored_auto_daylight_does_not_block_timer(self, test_client, auth_headers):
        """Should let a save without autoDaylight enable the light timer."""
        test_client.post("/api/save-auto-daylight", json={"autoDaylight": True}, headers=auth_headers)

        payload = {"lightTimerEnabled": True, "lightTimers": [WINDOW]}
        response = test_client.post("/api/timers", json=payload, headers=auth_headers)
        assert response.json()["lightTimerDisabledByAutoDaylight"] is False

        data = test_client.get("/api/timers", headers=auth_headers).json()
        assert data["autoDaylight"] is True
        assert data["timers"]["lightTimerEnabled"] is True

    def test_enable_auto_daylight_disables_timer(self, test_client, auth_headers):
        test_client.post("/api/timers", json={"lightTimerEnabled": True, "lightTimers": [WINDOW]}, headers=auth_headers)

        response = test_client.post("/api/save-auto-daylight", json={"autoDaylight": True}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True, "lightTimerDisabledByAutoDaylight": True}

        data = test_client.get("/api/timers", headers=auth_headers).json()
        assert data["autoDaylight"] is True
        assert data["timers"]["lightTimerEnabled"] is False

    def test_disable_auto_daylight(self, test_client, auth_headers):
        response = test_client.post("/api/save-auto-daylight", json={"autoDaylight": False}, headers=auth_headers)
        assert response.json() == {"success": True, "lightTimerDisabledByAutoDaylight": False}

    def test_auto_daylight_must_be_bool(self, test_client, auth_headers):
        response = test_client.post("/api/save-auto-daylight", json={"autoDaylight": "yes"}, headers=auth_headers)
        assert response.status_code == 422

    def test_get_auto_daylight(self, test_client, auth_headers):
        test_client.post("/api/save-auto-daylight", json={"autoDaylight": True}, headers=auth_headers)
        response = test_client.post("/api/get-auto-daylight", json={"email": "ada@example.com"})
        assert response.status_code == 200
        assert response.json()["autoDaylight"] is True

    def test_get_auto_daylight_unknown(self, test_client):
        response = test_client.post("/api/get-auto-daylight", json={"email": "nobody@example.com"})
        assert response.status_code == 404

    def test_get_auto_daylight_missing_email(self, test_client):
        assert test_client.post("/api/get-auto-daylight", json={}).status_code == 400


class TestAutoLightEndpoint:
    """Tests for the daylight color endpoint."""

    def test_noon(self, test_client, registered_user, clock):
        set_time(clock, 12)
        response = test_client.get("/api/auto-light", params={"email": "ada@example.com"})
        assert response.status_code == 200
        assert response.json() == {"r": 255, "g": 255, "b": 255}

    def test_night_uses_brightness(self, test_client, auth_headers, clock):
        test_client.post("/settings", json={"brightness": 128}, headers=auth_headers)
        set_time(clock, 2)
        response = test_client.get("/api/auto-light", params={"email": "ada@example.com"})
        assert response.json() == {"r": 10, "g": 10, "b": 30}

    def test_zero_brightness_means_full(self, test_client, auth_headers, clock):
        test_client.post("/settings", json={"brightness": 0}, headers=auth_headers)
        set_time(clock, 6)
        response = test_client.get("/api/auto-light", params={"email": "ada@example.com"})
        assert response.json() == {"r": 255, "g": 150, "b": 50}

    def test_missing_email(self, test_client):
        response = test_client.get("/api/auto-light")
        assert response.status_code == 400
        assert response.json()["detail"] == "Email is required"

    def test_unknown_user(self, test_client):
        response = test_client.get("/api/auto-light", params={"email": "nobody@example.com"})
        assert response.status_code == 404

    def test_user_without_settings(self, test_client, user_store):
        user_store.put_user(UserRecord(email="nos@example.com", password="hash"))
        response = test_client.get("/api/auto-light", params={"email": "nos@example.com"})
        assert response.status_code == 404
        assert response.json()["detail"] == "User not found or missing settings"


class TestLightTimerColorEndpoint:
    """Tests for the light timer color endpoint."""

    @pytest.fixture
    def timer_user(self, test_client, auth_headers):
        test_client.post("/api/timers", json={"lightTimerEnabled": True, "lightTimers": [WINDOW]}, headers=auth_headers)
        return "ada@example.com"

    def test_fade_in(self, test_client, timer_user, clock):
        set_time(clock, 6, 30)
        response = test_client.get("/api/light-timer-color", params={"email": timer_user})
        assert response.status_code == 200
        assert response.json() == {"r": 128, "g": 77, "b": 0}

    def test_peak(self, test_client, timer_user, clock):
        set_time(clock, 12)
        response = test_client.get("/api/light-timer-color", params={"email": timer_user})
        assert response.json() == {"r": 255, "g": 153, "b": 0}

    def test_fade_out(self, test_client, timer_user, clock):
        set_time(clock, 19, 30)
        response = test_client.get("/api/light-timer-color", params={"email": timer_user})
        assert response.json() == {"r": 128, "g": 77, "b": 0}

    def test_no_active_window(self, test_client, timer_user, clock):
        set_time(clock, 23)
        response = test_client.get("/api/light-timer-color", params={"email": timer_user})
        assert response.json() == {"color": None}

    def test_disabled_timer(self, test_client, auth_headers, clock):
        test_client.post("/api/timers", json={"lightTimerEnabled": False, "lightTimers": [WINDOW]}, headers=auth_headers)
        set_time(clock, 12)
        response = test_client.get("/api/light-timer-color", params={"email": "ada@example.com"})
        assert response.json() == {"color": None}

    def test_uses_brightness(self, test_client, timer_user, auth_headers, clock):
        test_client.post("/settings", json={"brightness": 128}, headers=auth_headers)
        set_time(clock, 12)
        response = test_client.get("/api/light-timer-color", params={"email": timer_user})
        assert response.json() == {"r": 128, "g": 77, "b": 0}

    def test_no_timers_block(self, test_client, registered_user):
        response = test_client.get("/api/light-timer-color", params={"email": "ada@example.com"})
        assert response.status_code == 404

    def test_missing_email(self, test_client):
        assert test_client.get("/api/light-timer-color").status_code == 400

    def test_user_without_settings(self, test_client, user_store):
        user_store.put_user(UserRecord(email="nos@example.com", password="hash"))
        response = test_client.get("/api/light-timer-color", params={"email": "nos@example.com"})
        assert response.status_code == 404

    def test_corrupt_stored_timers(self, test_client, registered_user, user_store):
        def corrupt(user):
            user.settings["timers"] = {"lightTimerEnabled": True, "lightTimers": [{"fadeIn": "bogus"}]}

        user_store.update_user("ada@example.com", corrupt)
        response = test_client.get("/api/light-timer-color", params={"email": "ada@example.com"})
        assert response.status_code == 500
        assert response.json()["detail"] == "Stored timer settings are invalid"


class TestStartup:
    """Tests for application startup checks."""

    def test_refuses_to_start_without_secret(self):
        """Should fail startup when JWT_SECRET is missing."""
        import asyncio
        from lightsync.main import app, lifespan

        async def start():
            async with lifespan(app):
                pass

        with patch("lightsync.config.JWT_SECRET", None):
            with pytest.raises(RuntimeError):
                asyncio.run(start())
