"""Record and aggregate containers: genes, sites, the gene index and windows."""
