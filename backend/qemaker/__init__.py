"""QEMaker: classroom quiz authoring, administration and grading API."""
