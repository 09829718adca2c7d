"""
Floating media viewer: picks how to display an uploaded file or saved link
and tracks the drag / resize geometry of the window showing it.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple, Union

import jinja2
from markupsafe import Markup

from quizmedia.config import (
    DEFAULT_VIEWER_HEIGHT,
    DEFAULT_VIEWER_WIDTH,
    MAX_VIEWPORT_FRACTION,
    MIN_VIEWER_HEIGHT,
    MIN_VIEWER_WIDTH,
    OPEN_OFFSET_DIVISOR,
    VIEWPORT_HEIGHT,
    VIEWPORT_WIDTH,
)
from quizmedia.events import PointerEvents, Subscription
from quizmedia.models import MediaDescriptor, PointerEvent, Position, Size

logger = logging.getLogger(__name__)

YOUTUBE_PATTERN = re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([^&?#/]+)")
YOUTUBE_EMBED_PREFIX = "https://www.youtube.com/embed/"
WEBSITE_SANDBOX = "allow-same-origin allow-scripts allow-popups allow-forms"
WORD_MIMETYPES = ("application/msword", "application/vnd.openxmlformats-officedocument")

RENDER_ERROR = "Error rendering media"
FRAME_REFUSED = "This site refused to connect in an iframe."

TEMPLATES = {
    "youtube.html": (
        '<iframe src="{{ url }}" title="YouTube Video" frameborder="0" allowfullscreen'
        ' style="width: 100%; height: 100%;"></iframe>'
    ),
    "website.html": (
        '<div class="media-website" style="width: 100%; height: 100%; display: flex;'
        ' flex-direction: column; align-items: center; justify-content: center; text-align: center;">'
        '<iframe src="{{ url }}" title="Embedded Website" sandbox="{{ sandbox }}" onload="checkFrame(this)"'
        ' style="width: 100%; height: 100%; border: 1px solid #ccc; background-color: #f8f8f8;"></iframe>'
        '<p class="media-error"{% if not frame_error %} hidden{% endif %}>{{ refused }}</p>'
        '<a href="{{ url }}" target="_blank" rel="noopener noreferrer">Open in new tab</a>'
        "</div>"
    ),
    "image.html": (
        '<img src="{{ url }}" alt="{{ alt }}"'
        ' data-load-error="{{ load_error }}" onerror="showLoadError(this)"'
        ' style="max-width: 100%; max-height: 100%; object-fit: contain;">'
    ),
    "video.html": (
        '<video controls src="{{ url }}"'
        ' data-load-error="{{ load_error }}" onerror="showLoadError(this)"'
        ' style="max-width: 100%; max-height: 100%; object-fit: contain;"></video>'
    ),
    "pdf.html": (
        '<embed src="{{ url }}" type="application/pdf"'
        ' data-load-error="{{ load_error }}" onerror="showLoadError(this)"'
        ' style="width: 100%; height: 100%;">'
    ),
    "link.html": '<a href="{{ url }}" target="_blank" rel="noopener noreferrer">{{ label }}</a>',
    "error.html": '<p class="media-error">{{ message }}</p>',
    # Page handed to the host frame; the handlers mirror report_load_error / report_frame_loaded
    "document.html": (
        "<script>\n"
        "function showLoadError(el) {\n"
        "  var message = document.createElement(\"p\");\n"
        "  message.className = \"media-error\";\n"
        "  message.textContent = el.getAttribute(\"data-load-error\");\n"
        "  el.replaceWith(message);\n"
        "}\n"
        "function checkFrame(frame) {\n"
        "  var body = null;\n"
        "  try {\n"
        "    var doc = frame.contentDocument || frame.contentWindow.document;\n"
        "    body = doc && doc.body ? doc.body.innerHTML : null;\n"
        "  } catch (err) {\n"
        "    body = null;\n"
        "  }\n"
        "  if (body === null || body.trim() === \"\") {\n"
        "    frame.nextElementSibling.hidden = false;\n"
        "  }\n"
        "}\n"
        "</script>\n"
        "{{ content }}"
    ),
}

_templates = jinja2.Environment(loader=jinja2.DictLoader(TEMPLATES), autoescape=True)


@dataclass
class MediaContent:
    """What a render strategy decided to show for one descriptor."""
    kind: str
    url: str
    template: str
    context: dict = field(default_factory=dict)
    load_error: Optional[str] = None  # shown if the host reports the media failed to load

    def render(self, **extra) -> str:
        return _templates.get_template(self.template).render(url=self.url, load_error=self.load_error, **self.context, **extra)


def render_error(message: str) -> str:
    return _templates.get_template("error.html").render(message=message)


def resolve_media_url(media: MediaDescriptor) -> Optional[str]:
    """YouTube watch / short links become embeddable player URLs; other paths pass through."""
    raw_url = media.path
    if not raw_url:
        return None
    match = YOUTUBE_PATTERN.search(raw_url)
    if match:
        return f"{YOUTUBE_EMBED_PREFIX}{match.group(1)}"
    return raw_url


# ---- Predicates (pure, evaluated in RENDER_RULES order) ----


def is_youtube(media: MediaDescriptor, url: str) -> bool:
    return "youtube.com/embed/" in url


def is_website(media: MediaDescriptor, url: str) -> bool:
    return media.mimetype == "text/url" or media.type == "url"


def is_image(media: MediaDescriptor, url: str) -> bool:
    return (media.mimetype or "").startswith("image/")


def is_video(media: MediaDescriptor, url: str) -> bool:
    return (media.mimetype or "").startswith("video/")


def is_pdf(media: MediaDescriptor, url: str) -> bool:
    return (media.mimetype or "").startswith("application/pdf")


def is_word_document(media: MediaDescriptor, url: str) -> bool:
    return (media.mimetype or "").startswith(WORD_MIMETYPES)


def is_anything(media: MediaDescriptor, url: str) -> bool:
    return True


# ---- Strategies ----


def youtube_frame(media: MediaDescriptor, url: str) -> MediaContent:
    return MediaContent(kind="youtube", url=url, template="youtube.html")


def website_frame(media: MediaDescriptor, url: str) -> MediaContent:
    return MediaContent(
        kind="website",
        url=url,
        template="website.html",
        context={"sandbox": WEBSITE_SANDBOX, "refused": FRAME_REFUSED},
    )


def inline_image(media: MediaDescriptor, url: str) -> MediaContent:
    return MediaContent(
        kind="image",
        url=url,
        template="image.html",
        context={"alt": media.originalname or "Image"},
        load_error="Failed to load image",
    )


def inline_video(media: MediaDescriptor, url: str) -> MediaContent:
    return MediaContent(kind="video", url=url, template="video.html", load_error="Failed to load video")


def inline_pdf(media: MediaDescriptor, url: str) -> MediaContent:
    return MediaContent(kind="pdf", url=url, template="pdf.html", load_error="Failed to load PDF")


def document_link(media: MediaDescriptor, url: str) -> MediaContent:
    return MediaContent(
        kind="document",
        url=url,
        template="link.html",
        context={"label": media.originalname or "Download Document"},
    )


def download_link(media: MediaDescriptor, url: str) -> MediaContent:
    return MediaContent(
        kind="download",
        url=url,
        template="link.html",
        context={"label": media.originalname or "Download Media"},
    )


Predicate = Callable[[MediaDescriptor, str], bool]
Strategy = Callable[[MediaDescriptor, str], MediaContent]

RENDER_RULES: List[Tuple[Predicate, Strategy]] = [
    (is_youtube, youtube_frame),
    (is_website, website_frame),
    (is_image, inline_image),
    (is_video, inline_video),
    (is_pdf, inline_pdf),
    (is_word_document, document_link),
    (is_anything, download_link),
]


def select_media_content(media: MediaDescriptor) -> Optional[MediaContent]:
    """First matching rule wins. None when the descriptor has nothing to show."""
    url = resolve_media_url(media)
    if not url:
        return None
    for predicate, strategy in RENDER_RULES:
        if predicate(media, url):
            return strategy(media, url)
    return None


class MediaViewer:
    """
    Draggable / resizable window around one media descriptor.

    States: closed, open-idle, open-dragging, open-resizing.
    Pointer listeners on the document are held only while the window is open.
    """

    def __init__(
        self,
        media: Union[MediaDescriptor, dict, None],
        label: Optional[str] = None,
        events: Optional[PointerEvents] = None,
    ):
        if isinstance(media, dict):
            media = MediaDescriptor.model_validate(media)
        self.media = media
        self.label = label
        self.events = events if events is not None else PointerEvents()

        self.is_open = False
        self.viewport = Size(width=VIEWPORT_WIDTH, height=VIEWPORT_HEIGHT)
        self.position = Position()
        self.size = Size(width=DEFAULT_VIEWER_WIDTH, height=DEFAULT_VIEWER_HEIGHT)
        self.is_dragging = False
        self.is_resizing = False
        self.error: Optional[str] = None
        self.frame_error = False

        self._drag_start = Position()
        self._resize_start = Size(width=0, height=0)
        self._subscription: Optional[Subscription] = None

    @property
    def renderable(self) -> bool:
        return bool(self.media and self.media.path and self.media.path.strip())

    @property
    def button_label(self) -> str:
        return self.label or "View Media"

    @property
    def title(self) -> str:
        return (self.media and self.media.originalname) or "Media"

    @property
    def state(self) -> str:
        if not self.is_open:
            return "closed"
        if self.is_dragging:
            return "open-dragging"
        if self.is_resizing:
            return "open-resizing"
        return "open-idle"

    # ---- Lifecycle ----

    def open(self, viewport: Optional[Size] = None) -> None:
        """Open with fresh geometry; nothing happens for a descriptor without a path."""
        if not self.renderable:
            return
        if viewport is not None:
            self.viewport = viewport
        self.position = Position(
            x=self.viewport.width / OPEN_OFFSET_DIVISOR,
            y=self.viewport.height / OPEN_OFFSET_DIVISOR,
        )
        self.size = Size(width=DEFAULT_VIEWER_WIDTH, height=DEFAULT_VIEWER_HEIGHT)
        self.is_dragging = False
        self.is_resizing = False
        self.error = None
        self.frame_error = False
        self.is_open = True

        if self._subscription is not None:
            self._subscription.release()
        self._subscription = self.events.subscribe(
            {
                "pointermove": self._on_pointer_move,
                "pointerup": self._on_pointer_up,
                "pointerdown": self._on_pointer_down,
            }
        )

    def close(self) -> None:
        self.is_open = False
        self.is_dragging = False
        self.is_resizing = False
        self.error = None
        self._release_listeners()

    def dispose(self) -> None:
        """Teardown by the host: drop listeners even if the window is still open."""
        self._release_listeners()
        self.is_open = False

    def _release_listeners(self) -> None:
        if self._subscription is not None:
            self._subscription.release()
            self._subscription = None

    # ---- Geometry ----

    def measured_size(self) -> Size:
        """Size as rendered: the window is capped at 90% of the viewport."""
        return Size(
            width=min(self.size.width, self.viewport.width * MAX_VIEWPORT_FRACTION),
            height=min(self.size.height, self.viewport.height * MAX_VIEWPORT_FRACTION),
        )

    def contains(self, x: float, y: float) -> bool:
        measured = self.measured_size()
        return (
            self.position.x <= x <= self.position.x + measured.width
            and self.position.y <= y <= self.position.y + measured.height
        )

    def begin_drag(self, x: float, y: float) -> None:
        self.is_dragging = True
        self._drag_start = Position(x=x - self.position.x, y=y - self.position.y)

    def begin_resize(self, x: float, y: float) -> None:
        self.is_resizing = True
        self._drag_start = Position(x=x, y=y)
        self._resize_start = Size(width=self.size.width, height=self.size.height)

    def pointer_move(self, x: float, y: float) -> None:
        if self.is_dragging:
            measured = self.measured_size()
            max_x = self.viewport.width - measured.width
            max_y = self.viewport.height - measured.height
            self.position = Position(
                x=max(0, min(x - self._drag_start.x, max_x)),
                y=max(0, min(y - self._drag_start.y, max_y)),
            )
        elif self.is_resizing:
            self.size = Size(
                width=max(MIN_VIEWER_WIDTH, self._resize_start.width + (x - self._drag_start.x)),
                height=max(MIN_VIEWER_HEIGHT, self._resize_start.height + (y - self._drag_start.y)),
            )

    def pointer_up(self) -> None:
        self.is_dragging = False
        self.is_resizing = False

    # ---- Document listeners ----

    def _on_pointer_down(self, event: PointerEvent) -> None:
        if not self.contains(event.client_x, event.client_y):
            self.close()
            return
        if event.target == "resize-handle":
            self.begin_resize(event.client_x, event.client_y)
        elif event.target in ("content", "button"):
            return
        else:
            self.begin_drag(event.client_x, event.client_y)

    def _on_pointer_move(self, event: PointerEvent) -> None:
        self.pointer_move(event.client_x, event.client_y)

    def _on_pointer_up(self, event: PointerEvent) -> None:
        self.pointer_up()

    # ---- Media load feedback from the host ----

    def report_load_error(self) -> None:
        """The <img>/<video>/<embed> failed to load; show the matching message instead."""
        content = select_media_content(self.media) if self.renderable else None
        if content is not None and content.load_error:
            self.error = content.load_error

    def report_frame_loaded(self, body_html: Optional[str]) -> None:
        """
        Embedded website finished loading. `body_html` is the frame's body markup,
        or None when the host could not read it.
        """
        if body_html is None or not body_html.strip():
            self.frame_error = True

    # ---- Rendering ----

    def render_content(self) -> str:
        if not self.renderable:
            return ""
        if self.error:
            return render_error(self.error)
        try:
            content = select_media_content(self.media)
            return content.render(frame_error=self.frame_error) if content else ""
        except Exception:
            logger.exception("Error rendering media %s", self.media.path)
            self.error = RENDER_ERROR
            return render_error(self.error)

    def render_document(self) -> str:
        """
        Content as a standalone page for the host frame, with the script that swaps
        in the load-failure text and reveals the refused-frame message.
        """
        if not self.renderable:
            return ""
        return _templates.get_template("document.html").render(content=Markup(self.render_content()))
