# backend/wsgi.py
from consignpos import create_app

app = create_app()
