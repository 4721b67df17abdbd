"""
Scheduling Domain

Pure availability logic shared by the public booking flow and the admin
calendar:

- business_hours.py  - weekday opening hours (Sunday closed)
- time_calculator.py - HH:MM parsing and the TimeInterval value type
- availability.py    - slot generation and overlap filtering
- calendar.py        - day / week / month display windows
- exceptions.py      - booking engine error taxonomy

Persistence lives in the bookings and clients domains.
"""
