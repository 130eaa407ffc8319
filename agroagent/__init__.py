"""AI Agro Agent: crop disease detection gateway, API client and Streamlit front-end."""

__version__ = "1.0.0"
