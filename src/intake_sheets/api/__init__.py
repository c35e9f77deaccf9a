"""HTTP interface for the Intake Sheets system."""
