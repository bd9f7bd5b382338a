"""
API Services - Business logic between the routers and the TMDB adapter / repositories
"""
