
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .routers import contacts, wizard
from .db import init_db
from .config import LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="E-Sign preparation API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
def on_startup():
    init_db()

app.include_router(wizard.router, prefix="/api/esign/sessions", tags=["esign"])
app.include_router(contacts.router, prefix="/api/contacts", tags=["contacts"])

@app.get("/")
def root():
    return {"ok": True, "service": "esign-api"}
