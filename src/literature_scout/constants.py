"""Project-wide constants and static PubMed lookup tables."""

# -- PubMed / NCBI ----------------------------------------------------------
NCBI_BASE_URL: str = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
ESEARCH_URL: str = f"{NCBI_BASE_URL}/esearch.fcgi"
EFETCH_URL: str = f"{NCBI_BASE_URL}/efetch.fcgi"
ESUMMARY_URL: str = f"{NCBI_BASE_URL}/esummary.fcgi"
ELINK_URL: str = f"{NCBI_BASE_URL}/elink.fcgi"
ESPELL_URL: str = f"{NCBI_BASE_URL}/espell.fcgi"
PUBMED_ARTICLE_URL: str = "https://pubmed.ncbi.nlm.nih.gov/{pmid}/"

# -- Base client defaults ---------------------------------------------------
DEFAULT_TIMEOUT: float = 30.0
DEFAULT_MAX_RETRIES: int = 3
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 503})

# -- Paging -----------------------------------------------------------------
MIN_RETMAX: int = 1
MAX_RETMAX: int = 100

# -- Query construction -----------------------------------------------------
MIN_QUERY_LENGTH: int = 10
UNTITLED_ARTICLE: str = "Untitled Article"

# Field tags accepted by validate_query in strict mode (compared lower-cased).
VALID_FIELD_TAGS: frozenset[str] = frozenset(
    {
        "all fields",
        "dp",
        "journal",
        "language",
        "la",
        "mesh subheading",
        "mesh terms",
        "mesh:noexp",
        "mh",
        "mh:noexp",
        "pdat",
        "publication type",
        "pt",
        "sh",
        "ta",
        "text word",
        "tiab",
        "title/abstract",
        "tw",
    }
)

# PubMed Clinical Queries filters, keyed by category name.
FILTER_MAP: dict[str, dict[str, str]] = {
    "Therapy": {
        "broad": (
            "((clinical[Title/Abstract] AND trial[Title/Abstract]) "
            "OR clinical trials as topic[MeSH Terms] OR clinical trial[Publication Type] "
            "OR random*[Title/Abstract] OR random allocation[MeSH Terms] "
            "OR therapeutic use[MeSH Subheading])"
        ),
        "narrow": (
            "(randomized controlled trial[Publication Type] "
            "OR (randomized[Title/Abstract] AND controlled[Title/Abstract] "
            "AND trial[Title/Abstract]))"
        ),
    },
    "Diagnosis": {
        "broad": (
            "(sensitiv*[Title/Abstract] OR sensitivity and specificity[MeSH Terms] "
            "OR diagnose[Title/Abstract] OR diagnosed[Title/Abstract] "
            "OR diagnoses[Title/Abstract] OR diagnosing[Title/Abstract] "
            "OR diagnosis[Title/Abstract] OR diagnostic[Title/Abstract] "
            "OR diagnosis[MeSH:noexp])"
        ),
        "narrow": "(specificity[Title/Abstract])",
    },
    "Etiology": {
        "broad": (
            "(risk[Title/Abstract] OR risk[MeSH:noexp] "
            "OR (risk adjustment[MeSH:noexp] OR risk assessment[MeSH:noexp]))"
        ),
        "narrow": (
            "((relative[Title/Abstract] AND risk[Title/Abstract]) "
            "OR (relative risk[Text Word]))"
        ),
    },
    "Prognosis": {
        "broad": (
            "(incidence[MeSH:noexp] OR mortality[MeSH Terms] "
            "OR follow up studies[MeSH:noexp] OR prognos*[Text Word])"
        ),
        "narrow": (
            "(prognos*[Title/Abstract] "
            "OR (first[Title/Abstract] AND episode[Title/Abstract]))"
        ),
    },
    "Clinical Prediction Guides": {
        "broad": (
            "(predict*[Title/Abstract] OR predictive value of tests[MeSH Terms] "
            "OR score[Title/Abstract])"
        ),
        "narrow": "(validation[Title/Abstract])",
    },
}

# Applied when no clinical category is requested, and ANDed with the
# category clause when one is.
DEFAULT_FILTER: str = (
    "(Clinical Trial[pt] OR Controlled Clinical Trial[pt] OR Meta-Analysis[pt] "
    "OR Multicenter Study[pt] OR Observational Study[pt] OR Practice Guideline[pt] "
    "OR Randomized Controlled Trial[pt] OR Review[pt] OR Systematic Review[pt]) "
    "AND English[Language]"
)

AGE_MAP: dict[str, str] = {
    "Newborn: Birth-1 month": "infant, newborn[mh]",
    "Infant: Birth-23 months": "infant[mh]",
    "Preschool Child: 2-5 years": "child, preschool[mh]",
    "Child: 6-12 years": "child[mh:noexp]",
    "Adolescent: 13-18 years": "adolescent[mh]",
    "Young Adult: 19-24 years": "young adult[mh]",
    "Adult: 19+ years": "adult[mh]",
    "Adult: 19-44 years": "adult[mh:noexp]",
    "Middle Aged: 45-64 years": "middle aged[mh]",
    "Middle Aged + Aged: 45+ years": "(middle aged[mh] OR aged[mh])",
    "Aged: 65+ years": "aged[mh]",
    "80 and over: 80+ years": "aged, 80 and over[mh]",
}

# -- Journals ---------------------------------------------------------------
# Short ISO abbreviations keep the journal clause inside the query ceiling.
CORE_CLINICAL_JOURNALS: list[str] = [
    "N Engl J Med",
    "JAMA",
    "Lancet",
    "BMJ",
    "Ann Intern Med",
    "JAMA Intern Med",
    "Nat Med",
    "PLoS Med",
]

SPECIALTY_JOURNALS: dict[str, list[str]] = {
    "cardiology": [
        "Circulation",
        "J Am Coll Cardiol",
        "Eur Heart J",
        "JAMA Cardiol",
        "Circ Heart Fail",
        "N Engl J Med",
        "Lancet",
        "JAMA",
    ],
    "internal_medicine": [
        "N Engl J Med",
        "JAMA",
        "Lancet",
        "BMJ",
        "Ann Intern Med",
        "JAMA Intern Med",
        "Am J Med",
        "J Gen Intern Med",
    ],
}

# Used by journal ranking; full titles and abbreviations both appear in
# PubMed records.
CLINICALLY_USEFUL_JOURNALS: list[str] = [
    "The New England journal of medicine",
    "N Engl J Med",
    "JAMA",
    "Lancet",
    "Lancet (London, England)",
    "BMJ",
    "BMJ (Clinical research ed.)",
    "Annals of internal medicine",
    "Ann Intern Med",
    "JAMA internal medicine",
    "JAMA Intern Med",
    "Nature medicine",
    "Nat Med",
    "PLoS medicine",
    "PLoS Med",
    "Circulation",
    "Journal of the American College of Cardiology",
    "J Am Coll Cardiol",
    "European heart journal",
    "Eur Heart J",
    "JAMA cardiology",
    "JAMA Cardiol",
    "Circulation. Heart failure",
    "Circ Heart Fail",
    "The American journal of medicine",
    "Am J Med",
    "Journal of general internal medicine",
    "J Gen Intern Med",
    "Cochrane Database Syst Rev",
    "The Cochrane database of systematic reviews",
]

USEFUL_JOURNAL_SCORE: float = 1.0
STANDARD_JOURNAL_SCORE: float = 0.1

# -- Blueprint processing ---------------------------------------------------
SPECIALTY_ALIASES: dict[str, str] = {
    "cardio": "cardiology",
    "neuro": "neurology",
    "endo": "endocrinology",
    "gastro": "gastroenterology",
    "psych": "psychiatry",
    "rheum": "rheumatology",
    "id": "infectious_diseases",
    "infectious disease": "infectious_diseases",
    "infectious diseases": "infectious_diseases",
    "internal medicine": "internal_medicine",
    "im": "internal_medicine",
}

# Default clinical categories per specialty when a request names none.
SPECIALTY_DEFAULT_CATEGORIES: dict[str, list[str]] = {
    "cardiology": ["Therapy", "Prognosis"],
    "endocrinology": ["Therapy"],
    "gastroenterology": ["Therapy", "Diagnosis"],
    "infectious_diseases": ["Therapy", "Etiology"],
    "internal_medicine": ["Therapy", "Diagnosis"],
    "neurology": ["Therapy", "Diagnosis"],
    "oncology": ["Therapy", "Prognosis"],
    "psychiatry": ["Therapy"],
    "pulmonology": ["Therapy", "Diagnosis"],
    "rheumatology": ["Therapy"],
}

# Suggested topics offered to callers choosing what to search for.
SPECIALTY_COMMON_TOPICS: dict[str, list[str]] = {
    "cardiology": [
        "heart failure",
        "atrial fibrillation",
        "coronary artery disease",
        "hypertension",
        "myocardial infarction",
    ],
    "endocrinology": [
        "type 2 diabetes",
        "type 1 diabetes",
        "obesity",
        "thyroid disease",
        "osteoporosis",
    ],
    "gastroenterology": [
        "inflammatory bowel disease",
        "cirrhosis",
        "gastroesophageal reflux",
        "pancreatitis",
        "colorectal cancer screening",
    ],
    "infectious_diseases": [
        "sepsis",
        "pneumonia",
        "hiv",
        "urinary tract infection",
        "antimicrobial resistance",
    ],
    "internal_medicine": [
        "hypertension",
        "diabetes",
        "chronic kidney disease",
        "venous thromboembolism",
        "preventive care",
    ],
    "neurology": [
        "stroke",
        "epilepsy",
        "multiple sclerosis",
        "parkinson disease",
        "migraine",
    ],
    "oncology": [
        "breast cancer",
        "lung cancer",
        "immunotherapy",
        "lymphoma",
        "prostate cancer",
    ],
    "psychiatry": [
        "depression",
        "schizophrenia",
        "bipolar disorder",
        "anxiety",
        "substance use disorder",
    ],
    "pulmonology": [
        "copd",
        "asthma",
        "interstitial lung disease",
        "pulmonary embolism",
        "sleep apnea",
    ],
    "rheumatology": [
        "rheumatoid arthritis",
        "systemic lupus erythematosus",
        "gout",
        "spondyloarthritis",
        "vasculitis",
    ],
}

# MeSH descriptors that mark an article as belonging to a specialty.
# Matched case-insensitively as substrings of an article's MeSH terms.
SPECIALTY_MESH_TERMS: dict[str, list[str]] = {
    "cardiology": [
        "Heart Diseases",
        "Cardiovascular Diseases",
        "Vascular Diseases",
        "Heart",
        "Blood Vessels",
        "Arrhythmias, Cardiac",
        "Percutaneous Coronary Intervention",
    ],
    "endocrinology": [
        "Endocrine System Diseases",
        "Diabetes Mellitus",
        "Thyroid Diseases",
        "Obesity",
        "Hormones",
    ],
    "gastroenterology": [
        "Digestive System Diseases",
        "Gastrointestinal Diseases",
        "Liver Diseases",
        "Pancreatic Diseases",
        "Gastrointestinal Tract",
    ],
    "infectious_diseases": [
        "Infections",
        "Communicable Diseases",
        "Bacterial Infections",
        "Virus Diseases",
        "Anti-Bacterial Agents",
    ],
    "internal_medicine": [
        "Internal Medicine",
        "Chronic Disease",
        "Hypertension",
        "Diabetes Mellitus",
        "Kidney Diseases",
    ],
    "neurology": [
        "Nervous System Diseases",
        "Brain Diseases",
        "Neurodegenerative Diseases",
        "Stroke",
        "Epilepsy",
        "Multiple Sclerosis",
        "Parkinson Disease",
    ],
    "oncology": [
        "Neoplasms",
        "Tumors",
        "Carcinoma",
        "Cancer",
        "Leukemia",
        "Lymphoma",
        "Radiotherapy",
    ],
    "psychiatry": [
        "Mental Disorders",
        "Depressive Disorder",
        "Schizophrenia",
        "Anxiety Disorders",
        "Psychotropic Drugs",
    ],
    "pulmonology": [
        "Respiratory Tract Diseases",
        "Lung Diseases",
        "Asthma",
        "Pulmonary Disease, Chronic Obstructive",
        "Lung",
    ],
    "rheumatology": [
        "Rheumatic Diseases",
        "Arthritis",
        "Autoimmune Diseases",
        "Connective Tissue Diseases",
        "Antirheumatic Agents",
    ],
}
