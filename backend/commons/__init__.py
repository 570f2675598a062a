"""
Shared helpers for the care platform services.

- errors: catalog of error keys resolved by the presentation layer
- countries: country name lookups (fr/en)
- formatting: phone numbers and amount rounding
- utils: dates for graphs, hashing, random strings, short urls
- face_recognition: client for the remote face comparison service
- testing: scaffolding for permission batch tests
"""
