"""Response Analysis & Visibility Scoring.

Heuristic pipeline for analyzing raw platform answers:
  1. Mention Extractor (business + competitors, list position, context)
  2. Citation Extractor (URL attributable to the business)
  3. Sentiment Classifier (lexicon-based)
  4. Response Parser (combines the three per response)
  5. Metrics Aggregator (visibility score, job summary, trend helpers)

Input:  raw answer text (from the gateway layer)
Output: ParsedResult / VisibilityMetrics
"""
