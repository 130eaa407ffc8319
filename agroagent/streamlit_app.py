import html
import io
from datetime import datetime

import streamlit as st

from agroagent import config
from agroagent.client import (
    ApiError,
    detect_disease,
    get_market_price,
    get_weather_advice,
    send_chat,
)
from agroagent.models import AnalysisRequest
from agroagent.views import render_report, show_image

POPULAR_CROPS = ["Wheat", "Rice", "Corn", "Soybean", "Cotton", "Sugarcane"]


# ----------------------------------------------------------
# PAGE CONFIG + FORCE LIGHT MODE
# ----------------------------------------------------------
st.set_page_config(page_title="AI Agro Agent", page_icon="🌱", layout="wide")

st.markdown("""
<style>
/* FORCE LIGHT MODE */
[data-testid="stAppViewContainer"] {
    background-color: #F4F6EE !important;
    color: black !important;
}
[data-testid="stHeader"] {
    background-color: #F4F6EE !important;
}

/* FIX INPUT LABELS NOT VISIBLE */
label, .stTextInput label, .stFileUploader label {
    color: #3B3B3B !important;
    font-weight: 600 !important;
}

/* Cards */
.agri-card {
    background: #FFFFFF;
    padding: 10px 15px;
    border-radius: 18px;
    box-shadow: 0px 8px 22px rgba(0,0,0,0.06);
    margin-bottom: 25px;
}

/* Disease Result */
.result-card {
    background: #FFF4D7;
    padding: 22px;
    border-radius: 16px;
    border-left: 8px solid #E5A437;
    margin-top: 15px;
    margin-bottom: 20px;
}

.healthy-card {
    background: #EEF6E4;
    border-left: 8px solid #4E6B37;
}

.badge {
    float: right;
    padding: 4px 12px;
    border-radius: 999px;
    font-size: 13px;
    font-weight: 700;
    color: white;
    background: #C0392B;
}

.badge-healthy {
    background: #4E6B37;
}

.treat-card {
    background: #F5F8EC;
    padding: 18px;
    border-radius: 14px;
    border: 1px solid #DCE8C8;
    margin-bottom: 12px;
}

div.stButton > button {
    box-shadow: 0px 3px 8px rgba(0,0,0,0.15);
}
</style>
""", unsafe_allow_html=True)


# ----------------------------------------------------------
# SESSION STATE
# ----------------------------------------------------------
DEFAULT_STATE = {
    "page": "Home",
    "chat_messages": [],
    "chat_busy": False,
    "detect_busy": False,
    "detect_result": None,
    "detect_error": None,
    "detect_file_key": None,
    "weather_busy": False,
    "weather_result": None,
    "weather_error": None,
    "market_busy": False,
    "market_result": None,
    "market_error": None,
}
for key, value in DEFAULT_STATE.items():
    if key not in st.session_state:
        st.session_state[key] = value


def start_call(flag):
    """Button callback: mark the call in flight so its trigger renders disabled."""
    st.session_state[flag] = True


def run_pending(flag, result_key, error_key, call, spinner_text):
    """Run the call flagged by `flag`, store its outcome and rerun the page."""
    if not st.session_state[flag]:
        return
    with st.spinner(spinner_text):
        try:
            st.session_state[result_key] = call()
            st.session_state[error_key] = None
        except ApiError as e:
            st.session_state[result_key] = None
            st.session_state[error_key] = str(e)
        finally:
            st.session_state[flag] = False
    st.rerun()


# ----------------------------------------------------------
# TOP NAVIGATION BAR
# ----------------------------------------------------------
menu_items = ["Home", "Chat", "Disease Detection", "Weather", "Market Price"]

cols = st.columns(len(menu_items))

for i, item in enumerate(menu_items):
    if cols[i].button(item, key=f"nav_{item}",
                      type="primary" if item == st.session_state.page else "secondary"):
        st.session_state.page = item
        st.rerun()

page = st.session_state.page


# =================================================================
# HOME PAGE
# =================================================================
if page == "Home":

    st.title("🌾 AI Agro Agent")
    st.write("Your intelligent farming companion. Get real-time advice on crops, weather patterns, "
             "disease detection, and market insights to maximize your agricultural success.")

    features = [
        ("💬 Smart Chat Assistant", "Get instant answers about farming techniques, crop management, and best practices.", "Chat"),
        ("🍁 Disease Detection", "Upload crop images to identify diseases and get treatment recommendations.", "Disease Detection"),
        ("🌤 Weather Insights", "Get local weather forecasts with farming-specific advice for your region.", "Weather"),
        ("📈 Market Prices", "Track and predict crop prices to optimize your selling strategy.", "Market Price"),
    ]

    col1, col2 = st.columns(2)
    for i, (title, description, target) in enumerate(features):
        with (col1 if i % 2 == 0 else col2):
            st.markdown(f"<div class='agri-card'><h4>{title}</h4><p>{description}</p></div>",
                        unsafe_allow_html=True)
            if st.button(f"Open {target}", key=f"home_{target}"):
                st.session_state.page = target
                st.rerun()


# =================================================================
# CHAT PAGE
# =================================================================
if page == "Chat":

    st.title("💬 Farming Assistant")
    st.write("Ask questions about farming, crops, weather conditions, and agricultural practices.")

    if not st.session_state.chat_messages:
        st.info("Start a conversation by typing your farming question below.")

    for message in st.session_state.chat_messages:
        with st.chat_message(message["role"]):
            st.write(message["content"])

    question = st.chat_input("Ask about crops, weather, farming techniques...",
                             key="chat_draft", disabled=st.session_state.chat_busy)
    if question and question.strip():
        st.session_state.chat_messages.append({"role": "user", "content": question.strip()})
        st.session_state.chat_busy = True
        st.rerun()

    if st.session_state.chat_busy:
        question = st.session_state.chat_messages[-1]["content"]
        with st.spinner("Thinking..."):
            try:
                reply = send_chat(question)
            except ApiError as e:
                reply = str(e)
            finally:
                st.session_state.chat_busy = False
        st.session_state.chat_messages.append({"role": "assistant", "content": reply})
        st.rerun()


# =================================================================
# DISEASE DETECTION PAGE
# =================================================================
if page == "Disease Detection":

    st.title("🍁 Crop Disease Detection")
    st.write("Upload a photo of your crop to identify potential diseases and get treatment advice.")

    uploaded_file = st.file_uploader("Upload Crop Image", type=["jpg", "jpeg", "png", "webp"])

    if uploaded_file:
        file_key = f"{uploaded_file.name}:{uploaded_file.size}"
        # A new selection clears the previous outcome
        if file_key != st.session_state.detect_file_key:
            st.session_state.detect_file_key = file_key
            st.session_state.detect_result = None
            st.session_state.detect_error = None

        show_image(uploaded_file, caption=uploaded_file.name, width=300)

    st.button("🔍 Detect Disease", key="detect_submit",
              disabled=uploaded_file is None or st.session_state.detect_busy,
              on_click=start_call, args=("detect_busy",))

    if uploaded_file is None:
        st.session_state.detect_busy = False
    else:
        def analyze():
            request = AnalysisRequest(
                image_bytes=uploaded_file.getvalue(),
                filename=uploaded_file.name,
                mime_type=uploaded_file.type or "image/jpeg",
            )
            result = detect_disease(
                request,
                session_token=st.session_state.get("access_token"),
                public_key=config.GATEWAY_PUBLIC_KEY,
            )
            return {
                "filename": result.filename,
                "prediction": result.prediction,
                "timestamp": datetime.now().strftime("%b %d, %Y at %I:%M %p"),
            }

        run_pending("detect_busy", "detect_result", "detect_error", analyze, "Analyzing...")

    if st.session_state.detect_error:
        st.error(f"❌ {st.session_state.detect_error}")

    if st.session_state.detect_result:
        render_report(st.session_state.detect_result,
                      io.BytesIO(uploaded_file.getvalue()) if uploaded_file else None)


# =================================================================
# WEATHER PAGE
# =================================================================
if page == "Weather":

    st.title("🌤 Weather Insights")
    st.write("Get weather forecasts and farming advice tailored to your location.")

    city = st.text_input("City", key="weather_city", placeholder="Enter city name...").strip()

    st.button("🔍 Get Weather", key="weather_submit",
              disabled=not city or st.session_state.weather_busy,
              on_click=start_call, args=("weather_busy",))

    if city:
        run_pending("weather_busy", "weather_result", "weather_error",
                    lambda: {"city": city, "advice": get_weather_advice(city)},
                    "Fetching weather...")
    else:
        st.session_state.weather_busy = False

    if st.session_state.weather_error:
        st.error(f"❌ {st.session_state.weather_error}")

    result = st.session_state.weather_result
    if result:
        st.markdown(f"""
        <div class='agri-card'>
            <h3>📍 {html.escape(result["city"])}</h3>
            <p>Weather forecast and farming recommendations</p>
            <b>🌱 Farming Advice</b>
            <p>{html.escape(result["advice"])}</p>
        </div>
        """, unsafe_allow_html=True)
    elif not st.session_state.weather_error:
        st.info("Enter your city name to get weather-based farming recommendations.")


# =================================================================
# MARKET PRICE PAGE
# =================================================================
if page == "Market Price":

    st.title("📈 Market Prices")
    st.write("Get predicted market prices for your crops to plan your sales strategy.")

    def quick_select(selected):
        st.session_state.market_crop = selected

    st.write("Popular crops:")
    crop_cols = st.columns(len(POPULAR_CROPS))
    for i, name in enumerate(POPULAR_CROPS):
        crop_cols[i].button(name, key=f"crop_{name}", on_click=quick_select, args=(name,))

    crop = st.text_input("Crop", key="market_crop", placeholder="Enter crop name...").strip()

    st.button("💰 Get Price", key="market_submit",
              disabled=not crop or st.session_state.market_busy,
              on_click=start_call, args=("market_busy",))

    if crop:
        run_pending("market_busy", "market_result", "market_error",
                    lambda: {"crop": crop, "price": get_market_price(crop)},
                    "Fetching market price...")
    else:
        st.session_state.market_busy = False

    if st.session_state.market_error:
        st.error(f"❌ {st.session_state.market_error}")

    result = st.session_state.market_result
    if result:
        st.markdown(f"""
        <div class='agri-card'>
            <h3>🌾 {html.escape(result["crop"])}</h3>
            <p>Predicted market price</p>
            <h2>{html.escape(result["price"])}</h2>
        </div>
        """, unsafe_allow_html=True)
