"""Browser-side modules (Playwright, sync API).

``snapshot`` and ``fingerprint`` summarize page state, ``proposer`` picks
the next interaction, ``input_filler`` populates visible fields,
``mutation_probe`` exposes the in-page re-render signal, ``navigation``
waits for document readiness on the start URL, and ``session``
owns the browser lifecycle.
"""
