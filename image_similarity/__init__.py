"""
image_similarity: similarity scores between raster images.

Combines a colour histogram and a DCT perceptual hash into one score in
[0, 1], for a single pair of images, all pairs in a directory, or one
image against a directory.

Modules:
    descriptor     Descriptor builder (histogram + perceptual hash)
    histograms     Joint RGB colour histograms + intersection
    perceptual     DCT perceptual hash + Hamming similarity
    preprocessing  Sample/channel normalization
    scoring        Descriptor scoring and ranking
    comparator     PairComparator: decode, describe, score
    batch          BatchOrchestrator: all-pairs and match modes
    image_io       Image decoding and candidate discovery
    report         Text/table/JSON rendering
    cli            Command-line entry point
"""

__version__ = "0.1.0"
