"""Spanish agreement body shown in place of the server's English text."""

AGREEMENT_BODY_ES = """<h2>EXENCIÓN DE RESPONSABILIDAD Y LIBERACIÓN DE RECLAMOS - CLUB DALLAS</h2>
<p>Fecha de vigencia: Hoy</p>

<p><strong>LEA CUIDADOSAMENTE.</strong> Este Acuerdo contiene una liberación de responsabilidad y la renuncia a ciertos derechos legales. Al ingresar a Club Dallas (el "Club"), usted acepta los términos que se indican a continuación.</p>

<h3>1. Definiciones</h3>
<p>"Club Dallas", "Club", "nosotros", "nos" y "nuestro" se refieren al/los operador(es), propietario(s), administradores, empleados, contratistas, agentes, afiliadas, sucesores y cesionarios de Club Dallas y de las instalaciones. "Invitado", "usted" y "su" se refieren a la persona que ingresa a las instalaciones.</p>

<h3>2. Ingreso voluntario y asunción de riesgos</h3>
<p>Usted reconoce que visitar y utilizar las instalaciones implica riesgos inherentes, incluidos, entre otros, resbalones y caídas, reacciones alérgicas, exposición a productos de limpieza, interacciones con otros invitados y otros riesgos previsibles e imprevisibles. Usted asume voluntariamente todos los riesgos de lesión, enfermedad, daño a la propiedad y pérdida que se deriven de su ingreso y permanencia en las instalaciones, ya sea por negligencia ordinaria o de otra forma, en la máxima medida permitida por la ley aplicable.</p>

<h3>3. Liberación y renuncia de responsabilidad</h3>
<p>En la máxima medida permitida por la ley, por medio del presente usted libera, renuncia y exime al Club de toda reclamación, demanda, daño, pérdida, responsabilidad, costo y causa de acción de cualquier tipo que surja de o se relacione con su ingreso, permanencia o participación en cualquier actividad dentro de las instalaciones, incluyendo reclamaciones basadas en la negligencia ordinaria del Club.</p>

<h3>4. Indemnización</h3>
<p>Usted acepta indemnizar, defender y sacar en paz y a salvo al Club frente a cualquier reclamación, daño, responsabilidad y gasto (incluidos honorarios razonables de abogados) que surjan de o se relacionen con sus acciones, conducta, violaciones a las reglas del Club o incumplimiento de este Acuerdo.</p>

<h3>5. Conducta y cumplimiento</h3>
<p>Usted acepta cumplir con todas las reglas publicadas, instrucciones del personal y leyes aplicables. El Club se reserva el derecho de negar el acceso o retirar a cualquier invitado a su discreción. Usted reconoce que las violaciones a las reglas del Club pueden resultar en la expulsión sin reembolso y, cuando corresponda, podrán ser reportadas a las autoridades.</p>

<h3>6. Declaración de salud y aptitud</h3>
<p>Usted declara que se encuentra físicamente en condiciones de ingresar y utilizar las instalaciones y que no realizará conductas que representen un riesgo de daño para usted o para otras personas. Usted es responsable de sus pertenencias.</p>

<h3>7. Bienes personales; limitación de responsabilidad</h3>
<p>El Club no se hace responsable por bienes personales perdidos, robados o dañados, incluidos objetos de valor dejados en casilleros, cuartos o áreas comunes, salvo en los casos en que dicha responsabilidad no pueda excluirse por ley.</p>

<h3>8. Aviso de foto/video</h3>
<p>En la medida permitida por la ley, usted reconoce que puede existir monitoreo de seguridad en ciertas áreas por motivos de seguridad y cumplimiento. El Club no garantiza privacidad en áreas no privadas. (Nada en este documento autoriza grabaciones en áreas privadas.)</p>

<h3>9. Resolución de controversias</h3>
<p>Cualquier controversia derivada de este Acuerdo o de su ingreso al Club se resolverá en un foro legal con jurisdicción, conforme a la ley aplicable. Si alguna disposición se considera inaplicable, las demás permanecerán vigentes.</p>

<h3>10. Acuerdo total</h3>
<p>Este Acuerdo constituye el entendimiento total respecto al ingreso a las instalaciones y sustituye cualquier comunicación previa sobre este tema. Al firmar, usted reconoce que ha leído y entendido este Acuerdo y que acepta obligarse por sus términos.</p>

<p><strong>RECONOCIMIENTO:</strong> He leído este Acuerdo, lo entiendo y acepto sus términos.</p>
"""
