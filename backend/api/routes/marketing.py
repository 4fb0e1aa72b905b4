"""Marketing form endpoints

One POST route per form in FORM_TEMPLATES. Each route renders the form into a
prompt, runs one completion and returns the normalized result with HTTP 200,
including when the model could not be reached.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body

from backend.core.prompt_templates import FORM_TEMPLATES, FormTemplate
from backend.core.service_wrapper import get_completion_service, get_sendgrid_service
from backend.utils.helpers import compact_json
from backend.utils.logger import get_logger
from services.errors import EmailDeliveryError

logger = get_logger(__name__)
router = APIRouter()

DEFAULT_TEST_RECIPIENT = "test@example.com"
DEFAULT_SENDER = "no-reply@example.com"
DEFAULT_SUBJECT = "Campaign"
EMPTY_HTML = "<p></p>"


def _as_text(value: Any) -> str:
    """Model and form fields may hold any JSON value; SendGrid needs strings"""
    return value if isinstance(value, str) else compact_json(value)


async def deliver_campaign(form_data: Dict[str, Any], result: Dict[str, Any]) -> Dict[str, Any]:
    """
    Send a generated campaign to the test recipient

    Only runs when the form asked for `sendNow`, SendGrid has a key and the
    model produced a usable result. The delivery outcome is written back into
    the result; a failed send never fails the request.
    """
    sendgrid = get_sendgrid_service()
    if not form_data.get("sendNow") or not sendgrid.is_configured or not result.get("ok"):
        return result

    to = _as_text(form_data.get("testTo") or DEFAULT_TEST_RECIPIENT)
    subject = _as_text(result.get("subject") or form_data.get("subjectHint") or DEFAULT_SUBJECT)
    html = _as_text(result.get("htmlBody") or result.get("raw") or EMPTY_HTML)

    try:
        await sendgrid.send(
            to=to,
            from_email=_as_text(form_data.get("from") or DEFAULT_SENDER),
            subject=subject,
            html=html
        )
        result["sent"] = True
        result["sentTo"] = to
    except EmailDeliveryError as e:
        logger.warning(f"Campaign email not sent | to={to} | error={e.message}")
        result["sent"] = False
        result["sendError"] = e.message
    except Exception as e:
        logger.exception(f"Campaign email not sent | to={to} | error={e}")
        result["sent"] = False
        result["sendError"] = str(e) or type(e).__name__

    return result


def _form_endpoint(template: FormTemplate):
    async def endpoint(form: Optional[Dict[str, Any]] = Body(None)) -> Dict[str, Any]:
        form_data = form if isinstance(form, dict) else {}
        logger.info(f"Form submitted | form={template.key} | fields={len(form_data)}")

        result = await get_completion_service().complete(template.render(form_data))

        if template.sends_email:
            result = await deliver_campaign(form_data, result)
        return result

    endpoint.__name__ = f"form_{template.category}_{template.form}".replace("-", "_")
    endpoint.__doc__ = f"{template.title}: returns the model's JSON answer, `{{ok:true, raw}}` when it is not a JSON object, or `{{ok:false, error}}`."
    return endpoint


for _template in FORM_TEMPLATES:
    router.add_api_route(
        _template.path,
        _form_endpoint(_template),
        methods=["POST"],
        summary=_template.title,
        tags=[_template.category],
    )
