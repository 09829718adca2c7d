import pytest

from quizmedia import media as media_module
from quizmedia.events import PointerEvents
from quizmedia.media import (
    FRAME_REFUSED,
    RENDER_ERROR,
    MediaViewer,
    is_image,
    is_website,
    is_word_document,
    resolve_media_url,
    select_media_content,
)
from quizmedia.models import MediaDescriptor, PointerEvent, Size

VIEWPORT = Size(width=1600, height=1000)


def descriptor(**fields):
    return MediaDescriptor(**fields)


def refused_shown():
    return f'<p class="media-error">{FRAME_REFUSED}</p>'


def pointer(event_type, x, y, target=None):
    return PointerEvent(type=event_type, client_x=x, client_y=y, target=target)


@pytest.fixture
def events():
    return PointerEvents()


@pytest.fixture
def viewer(events):
    v = MediaViewer(descriptor(path="https://cdn.test/cat.png", mimetype="image/png", originalname="cat.png"), events=events)
    v.open(VIEWPORT)
    return v


# ---- URL resolution + strategy selection ----


@pytest.mark.parametrize(
    "path, expected",
    [
        ("https://www.youtube.com/watch?v=ABC123", "https://www.youtube.com/embed/ABC123"),
        ("https://www.youtube.com/watch?v=ABC123&t=42s", "https://www.youtube.com/embed/ABC123"),
        ("https://youtu.be/XYZ789", "https://www.youtube.com/embed/XYZ789"),
        ("https://example.com/lecture.mp4", "https://example.com/lecture.mp4"),
        ("uploads/notes.pdf", "uploads/notes.pdf"),
    ],
)
def test_resolve_media_url(path, expected):
    assert resolve_media_url(descriptor(path=path)) == expected


def test_resolve_media_url_without_path():
    assert resolve_media_url(descriptor()) is None
    assert resolve_media_url(descriptor(path="")) is None


@pytest.mark.parametrize(
    "fields, kind",
    [
        ({"path": "https://www.youtube.com/watch?v=ABC123", "mimetype": "text/url"}, "youtube"),
        ({"path": "https://example.com", "mimetype": "text/url"}, "website"),
        ({"path": "https://example.com", "type": "url"}, "website"),
        ({"path": "a.png", "mimetype": "image/png"}, "image"),
        ({"path": "a.mp4", "mimetype": "video/mp4"}, "video"),
        ({"path": "a.pdf", "mimetype": "application/pdf"}, "pdf"),
        ({"path": "a.doc", "mimetype": "application/msword"}, "document"),
        (
            {"path": "a.docx", "mimetype": "application/vnd.openxmlformats-officedocument.wordprocessingml.document"},
            "document",
        ),
        ({"path": "a.zip", "mimetype": "application/zip"}, "download"),
        ({"path": "a.bin"}, "download"),
    ],
)
def test_first_matching_rule_wins(fields, kind):
    assert select_media_content(descriptor(**fields)).kind == kind


def test_predicates_are_plain_functions():
    assert is_image(descriptor(mimetype="image/gif"), "x.gif")
    assert not is_image(descriptor(), "x.gif")
    assert is_website(descriptor(type="url"), "https://example.com")
    assert is_word_document(descriptor(mimetype="application/msword"), "x.doc")
    assert not is_word_document(descriptor(mimetype="application/pdf"), "x.pdf")


def test_youtube_renders_embed_frame():
    html = select_media_content(descriptor(path="https://www.youtube.com/watch?v=ABC123")).render()
    assert 'src="https://www.youtube.com/embed/ABC123"' in html
    assert "allowfullscreen" in html


def test_website_frame_is_sandboxed_with_open_link():
    content = select_media_content(descriptor(path="https://example.com/article", mimetype="text/url"))
    html = content.render(frame_error=False)
    assert 'sandbox="allow-same-origin allow-scripts allow-popups allow-forms"' in html
    assert "Open in new tab" in html
    assert 'onload="checkFrame(this)"' in html
    assert f'<p class="media-error" hidden>{FRAME_REFUSED}</p>' in html
    assert refused_shown() in content.render(frame_error=True)


def test_document_links_use_display_name_or_label():
    named = descriptor(path="a.docx", mimetype="application/msword", originalname="Syllabus.docx")
    assert ">Syllabus.docx</a>" in select_media_content(named).render()
    unnamed = descriptor(path="a.docx", mimetype="application/msword")
    assert ">Download Document</a>" in select_media_content(unnamed).render()
    other = descriptor(path="a.zip", mimetype="application/zip")
    assert ">Download Media</a>" in select_media_content(other).render()


def test_markup_is_escaped():
    html = select_media_content(descriptor(path="a.zip", originalname="<script>x</script>")).render()
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


# ---- Descriptor without a path ----


@pytest.mark.parametrize("media", [None, {}, {"path": ""}, {"path": "   "}])
def test_viewer_without_path_is_a_noop(media, events):
    v = MediaViewer(media, events=events)
    assert v.renderable is False
    v.open(VIEWPORT)
    assert v.is_open is False
    assert v.render_document() == ""
    assert v.render_content() == ""
    assert events.listener_count("pointerdown") == 0


# ---- Lifecycle ----


def test_open_resets_geometry(viewer):
    assert viewer.state == "open-idle"
    assert viewer.position.x == VIEWPORT.width / 8
    assert viewer.position.y == VIEWPORT.height / 8
    assert (viewer.size.width, viewer.size.height) == (800, 600)


def test_reopen_discards_previous_geometry(viewer, events):
    viewer.begin_resize(1000, 800)
    viewer.pointer_move(1100, 850)
    viewer.pointer_up()
    viewer.begin_drag(300, 200)
    viewer.pointer_move(400, 300)
    viewer.pointer_up()
    viewer.error = "Failed to load image"

    viewer.open(VIEWPORT)
    viewer.open(VIEWPORT)

    assert (viewer.size.width, viewer.size.height) == (800, 600)
    assert (viewer.position.x, viewer.position.y) == (200, 125)
    assert viewer.error is None
    assert events.listener_count("pointermove") == 1


def test_listeners_exist_only_while_open(viewer, events):
    for event_type in ("pointermove", "pointerup", "pointerdown"):
        assert events.listener_count(event_type) == 1
    viewer.close()
    for event_type in ("pointermove", "pointerup", "pointerdown"):
        assert events.listener_count(event_type) == 0


def test_dispose_releases_listeners(viewer, events):
    viewer.dispose()
    assert viewer.is_open is False
    assert events.listener_count("pointerdown") == 0


def test_click_outside_closes_and_clears_error(viewer, events):
    viewer.report_load_error()
    assert viewer.error == "Failed to load image"

    events.dispatch(pointer("pointerdown", 5, 5))

    assert viewer.state == "closed"
    assert viewer.error is None
    assert events.listener_count("pointerdown") == 0


def test_close_control(viewer):
    viewer.begin_drag(250, 150)
    viewer.close()
    assert viewer.state == "closed"
    assert viewer.is_dragging is False


# ---- Drag ----


def test_drag_on_chrome_moves_window(viewer, events):
    events.dispatch(pointer("pointerdown", 250, 150, target="chrome"))
    assert viewer.state == "open-dragging"

    events.dispatch(pointer("pointermove", 350, 250))
    assert (viewer.position.x, viewer.position.y) == (300, 225)

    events.dispatch(pointer("pointerup", 350, 250))
    assert viewer.state == "open-idle"
    assert (viewer.position.x, viewer.position.y) == (300, 225)


@pytest.mark.parametrize("target", ["content", "button"])
def test_pointer_down_on_content_or_buttons_does_not_drag(viewer, events, target):
    events.dispatch(pointer("pointerdown", 250, 150, target=target))
    assert viewer.state == "open-idle"


@pytest.mark.parametrize(
    "move_to, expected",
    [
        ((-5000, -5000), (0, 0)),
        ((5000, 5000), (800, 400)),
        ((5000, -5000), (800, 0)),
    ],
)
def test_drag_is_clamped_to_viewport(viewer, move_to, expected):
    viewer.begin_drag(250, 150)
    viewer.pointer_move(*move_to)
    assert (viewer.position.x, viewer.position.y) == expected
    measured = viewer.measured_size()
    assert 0 <= viewer.position.x <= VIEWPORT.width - measured.width
    assert 0 <= viewer.position.y <= VIEWPORT.height - measured.height


def test_drag_clamp_uses_rendered_size(events):
    v = MediaViewer(descriptor(path="a.png", mimetype="image/png"), events=events)
    v.open(Size(width=800, height=600))
    # the 800x600 window is capped to 90% of the viewport when rendered
    assert (v.measured_size().width, v.measured_size().height) == (720, 540)
    v.begin_drag(v.position.x, v.position.y)
    v.pointer_move(5000, 5000)
    assert (v.position.x, v.position.y) == (80, 60)


# ---- Resize ----


def test_resize_handle_grows_window(viewer, events):
    events.dispatch(pointer("pointerdown", 990, 715, target="resize-handle"))
    assert viewer.state == "open-resizing"
    events.dispatch(pointer("pointermove", 1090, 765))
    assert (viewer.size.width, viewer.size.height) == (900, 650)
    events.dispatch(pointer("pointerup", 1090, 765))
    assert viewer.state == "open-idle"


def test_resize_never_goes_below_minimum(viewer):
    viewer.begin_resize(900, 700)
    viewer.pointer_move(900 - 1000, 700 - 1000)
    assert (viewer.size.width, viewer.size.height) == (300, 200)


def test_pointer_moves_while_idle_change_nothing(viewer, events):
    events.dispatch(pointer("pointermove", 10, 10))
    assert (viewer.position.x, viewer.position.y) == (200, 125)
    assert (viewer.size.width, viewer.size.height) == (800, 600)


# ---- Errors + rendering ----


@pytest.mark.parametrize(
    "mimetype, message",
    [
        ("image/png", "Failed to load image"),
        ("video/mp4", "Failed to load video"),
        ("application/pdf", "Failed to load PDF"),
    ],
)
def test_load_error_replaces_media(events, mimetype, message):
    v = MediaViewer(descriptor(path="file", mimetype=mimetype), events=events)
    v.open(VIEWPORT)
    v.report_load_error()
    assert v.error == message
    assert message in v.render_content()
    assert "src=" not in v.render_content()


def test_empty_frame_shows_refused_message(events):
    v = MediaViewer(descriptor(path="https://example.com", mimetype="text/url"), events=events)
    v.open(VIEWPORT)
    v.report_frame_loaded("<p>content</p>")
    assert refused_shown() not in v.render_content()
    v.report_frame_loaded("   ")
    assert refused_shown() in v.render_content()
    assert "Open in new tab" in v.render_content()


def test_unreadable_frame_counts_as_empty(events):
    v = MediaViewer(descriptor(path="https://example.com", type="url"), events=events)
    v.open(VIEWPORT)
    v.report_frame_loaded(None)
    assert v.frame_error is True


def test_render_exception_becomes_error_state(viewer, monkeypatch):
    def broken(media):
        raise RuntimeError("template exploded")

    monkeypatch.setattr(media_module, "select_media_content", broken)
    html = viewer.render_content()
    assert RENDER_ERROR in html
    assert viewer.error == RENDER_ERROR


@pytest.mark.parametrize(
    "mimetype, message",
    [
        ("image/png", "Failed to load image"),
        ("video/mp4", "Failed to load video"),
        ("application/pdf", "Failed to load PDF"),
    ],
)
def test_document_swaps_in_load_error_on_the_client(events, mimetype, message):
    v = MediaViewer(descriptor(path="https://cdn.test/file", mimetype=mimetype), events=events)
    v.open(VIEWPORT)
    html = v.render_document()
    assert "function showLoadError(el)" in html
    assert 'onerror="showLoadError(this)"' in html
    assert f'data-load-error="{message}"' in html
    assert 'src="https://cdn.test/file"' in html


def test_document_checks_embedded_website(events):
    v = MediaViewer(descriptor(path="https://example.com", mimetype="text/url"), events=events)
    v.open(VIEWPORT)
    html = v.render_document()
    assert "function checkFrame(frame)" in html
    assert 'onload="checkFrame(this)"' in html
    assert f'<p class="media-error" hidden>{FRAME_REFUSED}</p>' in html


def test_document_shows_reported_error_without_media(viewer):
    viewer.report_load_error()
    html = viewer.render_document()
    assert '<p class="media-error">Failed to load image</p>' in html
    assert "<img" not in html


def test_labels(events):
    v = MediaViewer({"path": "a.png"}, events=events)
    assert v.button_label == "View Media"
    assert v.title == "Media"
    v = MediaViewer({"path": "a.png", "originalname": "Diagram"}, label="Show diagram", events=events)
    assert v.button_label == "Show diagram"
    assert v.title == "Diagram"
