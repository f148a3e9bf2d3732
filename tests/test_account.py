"""Tests for my details, phone number and password screens."""
from app.usermgmt.platform import ClientError, Unauthorized, ValidationError
from app.usermgmt.platform.models import MyDetails


def _rendered(rendered, name):
    return [ctx for tpl, ctx in rendered if tpl == name][-1]


def test_my_details(client, platform, rendered):
    platform.details = MyDetails(
        id=55,
        firstname="Ada",
        surname="Admin",
        email="ada@example.com",
        roles=["Manager", "OPG User", "Case Manager"],
        teams=["Casework Team"],
    )
    r = client.get("/my-details")
    assert r.status_code == 200
    ctx = _rendered(rendered, "account/my_details.html")
    assert ctx["organisation"] == "OPG User"
    assert ctx["roles"] == ["Manager", "Case Manager"]
    assert ctx["teams"] == ["Casework Team"]
    assert ctx["can_edit_phone_number"] is True
    assert platform.calls_to("has_permission") == [("user", "patch")]


def test_my_details_hides_edit_without_permission(client, platform, rendered):
    platform.permissions["user"] = []
    r = client.get("/my-details")
    assert _rendered(rendered, "account/my_details.html")["can_edit_phone_number"] is False
    assert b"phone number</span>" not in r.data


def test_my_details_needs_no_admin_role(client, platform):
    platform.details = MyDetails(id=2, roles=["Case Manager"])
    assert client.get("/my-details").status_code == 200


def test_my_details_unauthorized(client, platform):
    platform.errors["my_details"] = Unauthorized()
    r = client.get("/my-details")
    assert r.status_code == 302
    assert r.headers["Location"] == "https://sirius.example/auth"


def test_edit_my_details(client, platform):
    platform.details = MyDetails(id=55, phone_number="0123")
    r = client.post("/my-details/edit", data={"phonenumber": "0987"})
    assert r.status_code == 302
    assert r.headers["Location"] == "/my-details"
    assert platform.calls_to("edit_my_details") == [(55, "0987")]


def test_edit_my_details_validation_error(client, platform, rendered):
    errors = {"phoneNumber": {"stringLengthTooLong": "The phone number is too long"}}
    platform.errors["edit_my_details"] = ValidationError("", errors)
    r = client.post("/my-details/edit", data={"phonenumber": "9" * 300})
    assert r.status_code == 400
    ctx = _rendered(rendered, "account/edit_my_details.html")
    assert ctx["errors"] == errors
    assert ctx["phone_number"] == "9" * 300


def test_change_password(client, platform, rendered):
    r = client.post("/change-password", data={"currentpassword": "old", "password1": "new", "password2": "new"})
    assert r.status_code == 200
    assert platform.calls_to("change_password") == [("old", "new", "new")]
    assert _rendered(rendered, "account/change_password.html")["success"] is True


def test_change_password_client_error(client, platform, rendered):
    platform.errors["change_password"] = ClientError("Current password is incorrect")
    r = client.post("/change-password", data={"currentpassword": "bad", "password1": "a", "password2": "a"})
    assert r.status_code == 400
    ctx = _rendered(rendered, "account/change_password.html")
    assert ctx["errors"] == {"currentpassword": {"": "Current password is incorrect"}}
    assert ctx["success"] is False
