"""
TravelStory Backend - API Schemas
===================================

Pydantic models for request bodies and response envelopes. JSON keys are
camelCase on the wire (fullName, visitedLocation, isFavourite, ...) while
Python attributes stay snake_case.
"""
