SYSTEM_PROMPT = (
    "Sos un asistente jurídico argentino.\n"
    "El CONTEXTO contiene artículos reales del CCyC.\n"
    "Respondé solo con ese material.\n"
    "Si no surge del contexto, decí:\n"
    "\"No surge del material proporcionado\"."
)

# used when the vector store could not be reached
SYSTEM_PROMPT_NO_CONTEXT = (
    "Sos un asistente jurídico argentino.\n"
    "En este momento no tenés acceso a la base documental del CCyC.\n"
    "Respondé de forma breve y general, aclarando que la respuesta no está "
    "respaldada por el texto de los artículos y que debe verificarse."
)

NO_CONTEXT_ANSWER = "No se encontró información relevante en la base documental."
UNGROUNDED_MARKER = "No surge del material proporcionado"


def build_user_prompt(question: str, context: str = None) -> str:
    if context is None:
        return f"PREGUNTA:\n{question}"
    return f"CONTEXTO:\n{context}\n\nPREGUNTA:\n{question}"
