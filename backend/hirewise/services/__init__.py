"""
Service Layer

- parsing_tracker.py: resume intake job state machine
- extraction.py: field extractors and extraction strategies
- requirement_interpreter.py: free text -> StructuredRequirement
- match_explainer.py: grounded candidate/requirement rationale
- search_summary.py: the search summary use case
- generation.py: text generation providers
- taxonomy.py: skills, roles, locations and certifications vocabulary
"""
