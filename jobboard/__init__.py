"""Job board backend: multi-role accounts, job postings and applications."""
