"""Streamlit views and their API client."""
