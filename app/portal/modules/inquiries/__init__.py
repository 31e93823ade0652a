"""
Contact inquiries: public lead capture plus admin triage
(read / archive / notes / delete).
"""
