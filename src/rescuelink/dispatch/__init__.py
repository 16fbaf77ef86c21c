"""Alert lifecycle, authorization policy and vehicle assignment coordination."""
