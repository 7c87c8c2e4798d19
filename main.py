# main.py

# Load .env sebelum settings dibaca
from dotenv import load_dotenv
load_dotenv(override=True)

from shipflow import create_app

# Uvicorn memanggil factory ini dengan 'factory=True'
app = create_app
