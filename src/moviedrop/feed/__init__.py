"""
Feed assembly - turns upstream movie pages into a swipe-ready discovery feed.

- sampler: salt -> upstream page number
- filters: drop seen ids and poster-less entries
- shuffle: randomized order with a lead-card tie-break
- seen_set: persisted set of ids the user has already been shown
- assembler: personalized -> popular fallback chain
- session: request generations, card states, signal dispatch
"""
