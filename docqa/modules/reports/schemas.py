from typing import Dict, List

# [{question_text: [{respondent_name: verbatim}, ...]}, ...]
VerbatimReport = List[Dict[str, List[Dict[str, str]]]]
