# Ready-made narratives offered when the user has no flyer at hand.
NARRATIVE_EXAMPLES = [
    {
        "title": "Festa na Praia",
        "text": "Em uma vibrante festa na praia ao pôr do sol, a pessoa de referência dança perto de uma fogueira, cercada por amigos e com o som das ondas ao fundo."
    },
    {
        "title": "Balada Neon",
        "text": "No coração de uma balada com luzes neon, a pessoa de referência está curtindo a música eletrônica, com feixes de laser coloridos criando uma atmosfera energética."
    },
    {
        "title": "Evento de Gala",
        "text": "Em um elegante evento de gala, a pessoa de referência, vestida a rigor, conversa animadamente em um salão luxuoso, com um lustre de cristal brilhando acima."
    },
    {
        "title": "Churrasco & Samba",
        "text": "Em um animado churrasco no quintal, a pessoa de referência segura uma cerveja gelada, sorrindo enquanto amigos tocam samba ao vivo ao fundo."
    }
]
