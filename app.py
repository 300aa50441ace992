from datetime import datetime

import streamlit as st
import streamlit.components.v1 as components

from history_store import HistoryStore, JsonFileStorage
from linkqr.files import clipboard_widget_html, download_filename, png_bytes, read_uploaded_logo
from linkqr.generator import QRCodeGenerator
from linkqr.logging import setup_logging
from linkqr.models import QR_SIZES, SIZE_LABELS, GeneratorState
from linkqr.qr_generator import is_valid_url
from settings_store import load_settings, save_settings


@st.cache_resource
def init_logging(log_dir, log_level):
    return setup_logging({"log_dir": log_dir, "log_level": log_level})


def get_history(settings):
    if "history" not in st.session_state:
        history = HistoryStore(JsonFileStorage(settings["history_file"]))
        history.load()
        st.session_state["history"] = history
    return st.session_state["history"]


def get_generator(settings):
    if "generator_state" not in st.session_state:
        st.session_state["generator_state"] = GeneratorState()
    return QRCodeGenerator(
        get_history(settings),
        state=st.session_state["generator_state"],
        settings=settings,
    )


def current_logo_source():
    if st.session_state.get("auto_detect_logo", True):
        return None
    return read_uploaded_logo(st.session_state.get("logo_file"))


def generation_options(settings):
    return {
        "size": int(st.session_state.get("qr_size", settings["default_size"])),
        "logo_enabled": bool(st.session_state.get("logo_enabled", False)),
        "logo_source": current_logo_source(),
        "auto_detect": bool(st.session_state.get("auto_detect_logo", True)),
    }


def on_generate(settings):
    # Enter in the URL box and the Generate button can both fire in one rerun.
    if st.session_state.get("generated_this_run"):
        return
    st.session_state["generated_this_run"] = True
    generator = get_generator(settings)
    generator.generate(st.session_state.get("url_input", ""), **generation_options(settings))


def on_select_history(url, settings):
    st.session_state["url_input"] = url
    generator = get_generator(settings)
    generator.select_history_entry(url, **generation_options(settings))


def on_download(settings):
    get_generator(settings).record_download()


def on_url_submit(settings):
    if (st.session_state.get("url_input") or "").strip():
        on_generate(settings)


def on_clear_history(settings):
    get_generator(settings).clear_history()


def show_notices(state):
    for notice in state.pop_notices():
        text = f"**{notice.title}** {notice.description}".strip()
        if notice.is_error:
            st.error(text)
        elif notice.is_warning:
            st.warning(text)
        else:
            st.success(text)


def show_settings(settings):
    with st.sidebar.expander("Settings"):
        with st.form("settings_form"):
            default_size = st.selectbox(
                "Default size",
                QR_SIZES,
                index=QR_SIZES.index(int(settings.get("default_size", 256)))
                if int(settings.get("default_size", 256)) in QR_SIZES else 1,
                format_func=lambda value: SIZE_LABELS[value],
            )
            logo_enabled = st.checkbox("Add logo by default", value=settings.get("logo_enabled", False))
            auto_detect_logo = st.checkbox(
                "Auto-detect website logo by default",
                value=settings.get("auto_detect_logo", True),
            )
            favicon_timeout = st.number_input(
                "Favicon probe timeout (s)",
                min_value=0.5,
                max_value=30.0,
                value=float(settings.get("favicon_timeout", 3.0)),
                step=0.5,
            )
            logo_timeout = st.number_input(
                "Logo load timeout (s)",
                min_value=0.5,
                max_value=60.0,
                value=float(settings.get("logo_timeout", 8.0)),
                step=0.5,
            )
            history_file = st.text_input("History file", value=settings.get("history_file", "qr_history.json"))
            submitted = st.form_submit_button("Save Settings")

        if submitted:
            save_settings({
                **settings,
                "default_size": int(default_size),
                "logo_enabled": logo_enabled,
                "auto_detect_logo": auto_detect_logo,
                "favicon_timeout": float(favicon_timeout),
                "logo_timeout": float(logo_timeout),
                "history_file": history_file.strip() or "qr_history.json",
            })
            st.session_state.pop("history", None)
            st.rerun()


# Callbacks have already run for this rerun.
st.session_state.pop("generated_this_run", None)

settings = load_settings()
init_logging(settings["log_dir"], settings["log_level"])

st.set_page_config(page_title="QR Code Generator", page_icon="🔳", layout="centered")
st.title("QR Code Generator")
st.caption("Convert any URL into a scannable QR code instantly")

st.session_state.setdefault("qr_size", int(settings["default_size"]))
st.session_state.setdefault("logo_enabled", bool(settings["logo_enabled"]))
st.session_state.setdefault("auto_detect_logo", bool(settings["auto_detect_logo"]))

generator = get_generator(settings)
state = generator.state
history = get_history(settings)

show_settings(settings)

url = st.text_input(
    "URL",
    key="url_input",
    placeholder="Enter URL (e.g., https://example.com)",
    label_visibility="collapsed",
    on_change=on_url_submit,
    args=(settings,),
)

logo_enabled = st.toggle("Add Logo", key="logo_enabled")
if logo_enabled:
    auto_detect = st.toggle("Auto-detect website logo", key="auto_detect_logo")
    if auto_detect:
        checked_url = st.session_state.get("favicon_checked_url")
        if url and is_valid_url(url) and checked_url != url.strip():
            with st.spinner("Detecting logo..."):
                generator.detect_favicon(url)
            st.session_state["favicon_checked_url"] = url.strip()
        if state.detected_favicon:
            col_icon, col_text = st.columns([1, 6])
            with col_icon:
                st.image(state.detected_favicon, width=32)
            with col_text:
                st.caption("Detected logo")
    else:
        uploaded = st.file_uploader(
            "Upload Logo",
            type=["png", "jpg", "jpeg", "gif", "webp", "ico", "bmp"],
            accept_multiple_files=False,
            key="logo_file",
        )
        if uploaded is not None:
            logo = read_uploaded_logo(uploaded)
            if logo is None:
                st.error("**Invalid File** Please select an image file")
            else:
                st.image(png_bytes(logo.data_url), width=48, caption="Logo preview")

st.selectbox(
    "Size",
    QR_SIZES,
    key="qr_size",
    format_func=lambda value: SIZE_LABELS[value],
)

button_label = "Generate QR Code + Logo" if logo_enabled else "Generate QR Code"
st.button(
    button_label,
    type="primary",
    width="stretch",
    on_click=on_generate,
    args=(settings,),
    disabled=state.is_generating or not (url or "").strip(),
)

show_notices(state)

if state.result:
    st.divider()
    st.image(png_bytes(state.result.image), caption="Generated QR Code")
    if state.result.used_logo:
        st.caption("QR Code with Logo")
    col_download, col_copy = st.columns(2)
    with col_download:
        st.download_button(
            "Download",
            data=png_bytes(state.result.image),
            file_name=download_filename(logo_enabled),
            mime="image/png",
            on_click=on_download,
            args=(settings,),
            width="stretch",
        )
    with col_copy:
        components.html(clipboard_widget_html(state.result.image), height=70)

entries = history.entries
if entries:
    st.divider()
    col_title, col_clear = st.columns([4, 1])
    with col_title:
        st.subheader("Recent URLs")
    with col_clear:
        st.button("Clear", on_click=on_clear_history, args=(settings,), key="clear_history")
    for index, entry in enumerate(entries):
        st.button(
            entry.url,
            key=f"history_{index}",
            on_click=on_select_history,
            args=(entry.url, settings),
            width="stretch",
            help=datetime.fromtimestamp(entry.timestamp / 1000).strftime("%Y-%m-%d"),
        )

