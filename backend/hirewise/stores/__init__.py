from hirewise.stores.job_store import JobStore
from hirewise.stores.candidate_store import CandidateStore

__all__ = ["JobStore", "CandidateStore"]
