"""
Known page shapes.

Each page the registration flow reads is described by a PageShape: a typed
record of which TagPattern yields which field.
"""

from __future__ import annotations

from dataclasses import dataclass

from .patterns import TagPattern


@dataclass(frozen=True)
class PageShape:
    """Named mapping of field name -> pattern for one kind of page."""

    name: str
    fields: dict[str, TagPattern]

    def pattern(self, field_name: str) -> TagPattern:
        return self.fields[field_name]


# License server landing page: "This server is not registered, sign in to register"
WELCOME_PAGE = PageShape(
    name="welcome",
    fields={
        "auth_link": TagPattern("a", where={"id": "register-link"}, attr="href"),
    },
)

# Account service sign-in page
AUTHORIZE_PAGE = PageShape(
    name="authorize",
    fields={
        "login_action": TagPattern("form", where={"id": "login-form"}, attr="action"),
    },
)


def registration_data_page(server_name: str) -> PageShape:
    """Shape of the page returned after signing in.

    The server UID is the value of the <option> labelled with server_name.
    """
    return PageShape(
        name="registration_data",
        fields={
            "registration_action": TagPattern(
                "form", where={"id": "server-registration-form"}, attr="action"
            ),
            "customer_id": TagPattern("input", where={"name": "customer"}, attr="value"),
            "server_uid": TagPattern("option", attr="value", text=server_name),
        },
    )
