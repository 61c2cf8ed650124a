"""TripChat API Routers"""
