from langchain_core.prompts import PromptTemplate

# Default "stuff documents" prompt of a retrieval QA chain
STUFF_QA_PROMPT = PromptTemplate.from_template(
    "Use the following pieces of context to answer the question at the end. "
    "If you don't know the answer, just say that you don't know, don't try to make up an answer.\n\n"
    "{context}\n\n"
    "Question: {question}\n"
    "Helpful Answer:"
)

GROUP_QUESTION_PROMPT = PromptTemplate.from_template(
    "{question}. Please provide a detailed summary based on the document content. "
    "The summary should include key points and relevant details. Always respond in Spanish. "
    "The response should not exceed 500 characters."
)

INTERVIEW_QUESTION_PROMPT = PromptTemplate.from_template(
    "{question}. Si no tienes una respuesta inmediata, por favor re-analiza los documentos y "
    "proporciona una respuesta basada en bases similares a la pregunta. Las respuestas deben estar "
    "en primera persona, como si el entrevistado estuviera respondiendo a la pregunta de la entrevista. "
    "Siempre responde en español."
)

INTERVIEWEE_NAME_QUERY = (
    "¿Cuál es el nombre del entrevistado? Solo dame el primer nombre sin texto extra. "
    "Responde siempre en español."
)

VERBATIM_PROMPT = PromptTemplate.from_template(
    "Select and return a small fragment of the following text with the most important idea. "
    "You can't change the words of the speaker; you may remove a few words but not change them. "
    "Must respond in Spanish. Must be in singular person. Return only the fragment.\n\n"
    "Text: {text}\n"
    "Fragment:"
)
