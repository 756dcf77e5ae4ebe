"""SEO agent components."""
