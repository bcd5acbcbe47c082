# services/__init__.py

# This file makes the 'services' directory a Python package.
# The search core lives here: filters -> query_planner -> pagination -> projection.
