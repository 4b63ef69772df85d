"""HTTP surface for the cloud spend pipeline."""
