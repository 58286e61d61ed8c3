"""Streamlit frontend for Atelier Agent."""

import base64

import streamlit as st

from core.config import get_api_base_url
from core.styles import ASPECT_RATIOS, STYLE_PRESETS
from frontend.session_state import StudioClient, StudioSession, generate, upload

# Configuration
API_BASE_URL = get_api_base_url()

# Page configuration
st.set_page_config(
    page_title="Atelier Agent",
    page_icon="🎨",
    layout="wide",
)


# ============================================================================
# Session Management
# ============================================================================


def get_studio() -> StudioSession:
    """Get the studio state for this browser session, creating it once."""
    if "studio" not in st.session_state:
        st.session_state.studio = StudioSession()
    return st.session_state.studio


def get_client() -> StudioClient:
    if "api_client" not in st.session_state:
        st.session_state.api_client = StudioClient(API_BASE_URL)
    return st.session_state.api_client


def decode_image(entry) -> bytes:
    return base64.b64decode(entry.base64_image)


# ============================================================================
# UI Components
# ============================================================================


def render_form(studio: StudioSession):
    """Render the art-direction form."""
    studio.prompt = st.text_area(
        "Art Direction Prompt",
        value=studio.prompt,
        height=140,
        placeholder="Describe the human figure study you want to create...",
    )

    col1, col2 = st.columns(2)
    with col1:
        style_keys = list(STYLE_PRESETS)
        studio.style = st.selectbox(
            "Style Preset",
            options=style_keys,
            index=style_keys.index(studio.style) if studio.style in style_keys else 0,
            format_func=lambda key: STYLE_PRESETS[key].label,
        )
    with col2:
        ratios = list(ASPECT_RATIOS)
        studio.aspect_ratio = st.selectbox(
            "Aspect Ratio",
            options=ratios,
            index=ratios.index(studio.aspect_ratio) if studio.aspect_ratio in ratios else 0,
            format_func=lambda ratio: ASPECT_RATIOS[ratio],
        )

    col1, col2 = st.columns(2)
    with col1:
        studio.negative_prompt = st.text_area(
            "Negative Prompt",
            value=studio.negative_prompt,
            height=90,
        )
    with col2:
        studio.guidance = st.slider(
            "Guidance Strength",
            min_value=1.0,
            max_value=20.0,
            step=0.5,
            value=float(studio.guidance),
        )
        st.caption(
            f"{studio.guidance:.1f} · Higher values force the model to follow "
            "your prompt more strictly."
        )

    if st.button(
        "Generate Figure Study",
        type="primary",
        disabled=not studio.can_generate,
    ):
        with st.spinner("Generating..."):
            generate(studio, get_client())
        st.rerun()

    if studio.generation_error:
        st.error(studio.generation_error)


def render_preview(studio: StudioSession):
    """Render the latest image, its metadata and the publish panel."""
    latest = studio.latest_image
    if latest:
        st.image(
            decode_image(latest),
            caption="Generated human figure artwork",
            width="stretch",
        )
    else:
        st.info(
            "**Your canvas is waiting**\n\n"
            "Generate a figure study to preview it here and prep it for Instagram."
        )

    meta = studio.generation_meta
    if meta:
        lines = [f"Prompt · **{meta.prompt}**", f"Style · **{meta.style}**"]
        if meta.model:
            lines.append(f"Model · **{meta.model}**")
        if meta.inference_time:
            lines.append(f"Inference Time · **{meta.inference_time:.2f}s**")
        st.caption("  \n".join(lines))

    with st.container(border=True):
        st.subheader("Instagram Caption")
        studio.caption = st.text_area(
            "Caption",
            value=studio.caption,
            height=100,
            label_visibility="collapsed",
        )
        if st.button(
            "Upload to Instagram",
            disabled=not studio.can_upload,
            width="stretch",
        ):
            with st.spinner("Publishing..."):
                upload(studio, get_client())
            st.rerun()

        if studio.upload_error:
            st.error(studio.upload_error)
        elif studio.last_publish:
            st.success(
                f"Published media {studio.last_publish.publish_id} "
                f"(container {studio.last_publish.container_id})"
            )
            entry = studio.last_published_entry
            if entry:
                thumb, details = st.columns([1, 3])
                with thumb:
                    st.image(decode_image(entry), width="stretch")
                with details:
                    st.caption(f"{entry.style} · {entry.prompt}")
                    if not studio.published_is_latest:
                        st.caption("A newer study is in the preview; this is the one that was posted.")
            st.caption(f"Hosted at {studio.last_publish.image_url}")

        st.caption(
            "Ensure environment variables for Stability AI, Cloudinary, and the "
            "Instagram Graph API are configured before deploying."
        )


def render_gallery(studio: StudioSession):
    """Render earlier generations of this session."""
    gallery = studio.gallery
    if not gallery:
        return

    st.divider()
    st.subheader("Session Gallery")
    columns = st.columns(3)
    for i, entry in enumerate(gallery):
        with columns[i % 3]:
            st.image(decode_image(entry), width="stretch")
            st.markdown(f"**{entry.style}**")
            st.caption(entry.prompt[:120] + ("..." if len(entry.prompt) > 120 else ""))


# ============================================================================
# Main App
# ============================================================================


def main():
    """Main application."""
    studio = get_studio()

    st.caption("ATELIER AGENT")
    st.title("AI Art Director for Instagram Figure Studies")
    st.write(
        "Generate expressive human figure studies, iterate on styles, and push "
        "finished pieces directly to your Instagram feed without leaving this "
        "workspace."
    )

    left, right = st.columns([1, 1.1])
    with left:
        render_form(studio)
    with right:
        render_preview(studio)

    render_gallery(studio)


if __name__ == "__main__":
    main()
