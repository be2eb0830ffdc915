"""Persistence services: translation repositories, the sync engine and query helpers."""
