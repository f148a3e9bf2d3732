from flask import Request

from app.usermgmt.platform import Context

XSRF_COOKIE = "XSRF-TOKEN"
XSRF_FORM_FIELD = "xsrfToken"


def get_context(req: Request) -> Context:
    """Build the platform context from the inbound request's cookies and XSRF token.

    Form posts carry the token in a hidden field; everything else reads the cookie.
    """
    if req.method == "POST":
        token = req.form.get(XSRF_FORM_FIELD) or ""
    else:
        token = req.cookies.get(XSRF_COOKIE) or ""
    return Context(cookies=dict(req.cookies), xsrf_token=token)
