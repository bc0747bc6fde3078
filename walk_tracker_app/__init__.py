"""Standing desk walk tracker: metrics, local storage and a Streamlit UI."""
