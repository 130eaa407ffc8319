import html

import streamlit as st
from PIL import Image, UnidentifiedImageError

from agroagent.parser import parse_ai_response, plant_name_from_filename


def show_image(source, **kwargs) -> bool:
    """Preview an uploaded image; unreadable files get an inline error instead."""
    try:
        image = Image.open(source)
        image.load()
    except (UnidentifiedImageError, OSError):
        st.error("⚠ Could not preview this file. It may not be a valid image.")
        return False
    st.image(image, **kwargs)
    return True


def render_report(result, image_source=None):
    """Result card for one detection: badge, diagnosis, symptoms, treatment.

    The raw prediction is shown verbatim when neither a disease nor a
    treatment could be parsed from it.
    """
    report = parse_ai_response(result["prediction"])
    healthy = report.is_healthy
    title = html.escape(plant_name_from_filename(result["filename"]) or "Crop Analysis")

    col1, col2 = st.columns([1, 4])
    with col1:
        if image_source is not None:
            show_image(image_source, width=120)

    with col2:
        diagnosis = html.escape(report.disease or "Unknown")
        if report.confidence:
            diagnosis += f" - {html.escape(report.confidence_display)} confidence"
        badge = "<span class='badge badge-healthy'>Healthy</span>" if healthy \
            else "<span class='badge'>Disease Detected</span>"

        symptoms = ""
        if report.symptoms:
            items = "".join(f"<li>{html.escape(s)}</li>" for s in report.symptoms)
            symptoms = f"<p><b>Symptoms Identified:</b></p><ul>{items}</ul>"

        st.markdown(f"""
        <div class='result-card {"healthy-card" if healthy else ""}'>
            {badge}
            <h3 style="text-transform: capitalize;">🌿 {title}</h3>
            <p>⏱ {html.escape(result["timestamp"])}</p>
            <p><b>Diagnosis:</b> {diagnosis}</p>
            {symptoms}
        </div>
        """, unsafe_allow_html=True)

    if report.treatment:
        prevention = ""
        if report.prevention:
            prevention = f"<br><br><b>🛡 Prevention:</b><br>{html.escape(report.prevention)}"
        st.markdown(f"""
            <div class='treat-card'>
                <b>💊 Treatment:</b><br>{html.escape(report.treatment)}{prevention}
            </div>
        """, unsafe_allow_html=True)

    if report.needs_raw_fallback:
        st.text(result["prediction"])
