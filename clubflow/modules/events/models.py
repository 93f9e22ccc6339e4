# Events live in the bookings table
# This file documents how they are stored

"""
An event is a row of the bookings table with facility_id = null.
It uses location instead of a facility and is visible to the whole
club while is_public is true.

participants holds the list of user ids that joined the event.
"""
