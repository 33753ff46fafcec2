"""Facebook Ads campaign metrics proxy and dashboard."""
