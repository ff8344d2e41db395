"""
GigIt
A two-sided marketplace where businesses post jobs and skilled workers apply.

Architecture:
- PostgreSQL: users, profiles, jobs, applications, contracts, messages
- S3-compatible bucket: resumes, images, license documents (presigned uploads)
- SMTP: welcome and password reset emails
"""

__version__ = "1.0.0"
