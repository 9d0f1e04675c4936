"""Personalized hackathon recommendations: fetch, normalize, export."""
