"""Prompt templates for the marketing forms

Every form posts arbitrary JSON. Its template turns that JSON into a prompt
that names the task and spells out the JSON object the model must return.
The schema text is advisory: the model's answer is relayed as-is.
"""
from dataclasses import dataclass
from typing import Any, Dict, List

from backend.utils.helpers import compact_json

DEFAULT_TAGLINE_COUNT = 6


@dataclass(frozen=True)
class FormTemplate:
    """One marketing form"""
    category: str
    form: str
    title: str
    lead: str
    schema: str
    sends_email: bool = False

    @property
    def key(self) -> str:
        return f"{self.category}/{self.form}"

    @property
    def path(self) -> str:
        return f"/{self.category}/{self.form}"

    def render(self, form_data: Dict[str, Any]) -> str:
        """Build the prompt for one submission"""
        count = form_data.get("count") or DEFAULT_TAGLINE_COUNT
        lead = self.lead.format(count=count)
        return f"{lead}: {compact_json(form_data)}.\nReturn JSON: {self.schema}"


FORM_TEMPLATES: List[FormTemplate] = [
    # ---------- Advertisement campaigning ----------
    FormTemplate(
        "ads", "google", "Google Ads Campaign",
        "Form: Google Ads Campaign creation. Input",
        "{ ok:true, campaignDraft:{ name, headlines:[...], descriptions:[...], keywords:[...], "
        "budget:{daily, total}, targeting:{locations, audiences} }, previewAdText:\"...\", "
        "notes:\"any tips or warnings\" }",
    ),
    FormTemplate(
        "ads", "meta", "Facebook/Instagram Ads",
        "Form: Facebook/Instagram Ads. Input",
        "{ ok:true, creativeSuggestions:{ caption, primaryText, headline, cta }, "
        "adPayload:{ platform, audience, creativeUrl }, notes:\"any sizing/format tips\" }",
    ),
    FormTemplate(
        "ads", "youtube", "YouTube Ads",
        "YouTube Ads creation. Input",
        "{ ok:true, adScript:\"...\", adDescription:\"...\", tags:[...], targeting:{...} }",
    ),
    FormTemplate(
        "ads", "event", "Event Ad Campaign",
        "Event Ad campaign. Input",
        "{ ok:true, headline, bannerText, shortDescription, suggestedSizes:[...], cta }",
    ),
    # ---------- Content marketing ----------
    FormTemplate(
        "content", "blog", "Blog Content Brief",
        "Create a blog content brief for input",
        "{ ok:true, title:\"...\", outline:[ {heading:\"\", subheadings:[\"\",\"\"], suggestedWords:300}, ... ], "
        "metaDescription:\"...\", seoKeywords:[...] }",
    ),
    FormTemplate(
        "content", "product-description", "Product Description",
        "Write product description and bullets. Input",
        "{ ok:true, bullets:[...], seoParagraph:\"...\" }",
    ),
    FormTemplate(
        "content", "video-script", "Video Script Brief",
        "Create a video script (include visual cues) for input",
        "{ ok:true, scriptText:\"...\", timestamps:[ {sec:0, text:\"...\"}, ... ], ttsNote:\"if you want TTS\" }",
    ),
    FormTemplate(
        "content", "infographic", "Infographic Brief",
        "Create an infographic brief for input",
        "{ ok:true, layout:[ {section:\"\", text:\"\", visual:\"icon/chart\"} ], suggestedColors:[...], exportText:\"...\" }",
    ),
    # ---------- Email marketing ----------
    FormTemplate(
        "email", "campaign", "Email Campaign",
        "Generate an email campaign from",
        "{ ok:true, subject:\"...\", htmlBody:\"<p>...</p>\", textBody:\"...\", cta:\"...\" }",
        sends_email=True,
    ),
    FormTemplate(
        "email", "drip", "Drip Automation",
        "Create a drip email sequence for input",
        "{ ok:true, steps:[ {delayHours:0, subject:\"...\", html:\"<p>..</p>\"}, ... ] }",
    ),
    # ---------- Events & webinars ----------
    FormTemplate(
        "events", "webinar", "Webinar Signup",
        "Setup Webinar confirmation + email copy for input",
        "{ ok:true, schedule:{title, startTime, duration}, confirmationEmail:{subject, html}, "
        "joinInfoNote:\"If connected to Zoom use OAuth\" }",
    ),
    FormTemplate(
        "events", "campaign", "Event Campaign",
        "Create event campaign assets for",
        "{ ok:true, headline, bannerText, socialCopy:{twitter, linkedin, instagram}, promotionPlan:[\"meta\",\"email\"] }",
    ),
    # ---------- Internal marketing planning ----------
    FormTemplate(
        "internal", "approval", "Campaign Approval",
        "Create a campaign approval review for",
        "{ ok:true, approvalStatus:\"pending/approved/needs_changes\", comments:[...], sheetRow:{id, link} }",
    ),
    FormTemplate(
        "internal", "budget", "Budget Allocation",
        "Propose budget allocations for",
        "{ ok:true, allocations:[ {team, amount, rationale} ], summary:\"...\" }",
    ),
    # ---------- Product marketing ----------
    FormTemplate(
        "product", "launch", "Product Launch",
        "Create product launch plan & copy for",
        "{ ok:true, heroCopy, emailSequence:[...], socialPlan:[...], assets:[{type, filename}] }",
    ),
    FormTemplate(
        "product", "upsell", "Upsell Email",
        "Write an upsell email for",
        "{ ok:true, subject, htmlBody, offerCode }",
    ),
    # ---------- Tools / stats ----------
    FormTemplate(
        "tools", "kpi", "KPI Tracker",
        "Record KPI (demo) for",
        "{ ok:true, recorded:{metric, value, timestamp}, trendSuggestion:\"up/down/neutral\" }",
    ),
    FormTemplate(
        "tools", "abtest", "A/B Test Tracker",
        "Propose A/B test tracking plan for",
        "{ ok:true, variantMetricsTemplate:{}, sampleSizeEstimate:1000, analysisPlan:\"...\" }",
    ),
    # ---------- Social media ----------
    FormTemplate(
        "social", "schedule", "Post Scheduler",
        "Schedule post (demo) for",
        "{ ok:true, scheduled:{platform, channelId, mediaUrl, scheduleAt}, previewUrl:\"...\" }",
    ),
    FormTemplate(
        "social", "caption", "Caption Generator",
        "Generate captions + hashtags for",
        "{ ok:true, captions:[ {length:'short', text:'...'}, {length:'long', text:'...'} ], hashtags:[...] }",
    ),
    # ---------- Sales promotion ----------
    FormTemplate(
        "sales", "offer", "Offer Campaign",
        "Create an offer campaign for",
        "{ ok:true, bannerText, emailCopy, adCopy, couponCode }",
    ),
    FormTemplate(
        "sales", "loyalty", "Loyalty Program",
        "Design a loyalty program for",
        "{ ok:true, tiers:[{name, criteria, benefits}], communicationPlan:[...] }",
    ),
    # ---------- Branding ----------
    FormTemplate(
        "branding", "identity", "Brand Identity",
        "Create a brand identity brief for",
        "{ ok:true, logoIdeas:[...], colorPalettes:[...], fontSuggestions:[...] }",
    ),
    FormTemplate(
        "branding", "tagline", "Tagline Generator",
        "Generate {count} taglines for brand",
        "{ ok:true, taglines:[ \"one\", \"two\" ] }",
    ),
]

TEMPLATES_BY_KEY: Dict[str, FormTemplate] = {template.key: template for template in FORM_TEMPLATES}


def get_template(key: str) -> FormTemplate:
    """Look up a form template by `category/form`

    Raises:
        KeyError: unknown form
    """
    return TEMPLATES_BY_KEY[key]
